"""Quartermaster: web console for role-based military asset tracking."""

__version__ = "1.0.0"
