"""HTTP surface: app factory, session middleware and page routers."""
