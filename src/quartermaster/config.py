from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

class AppSettings(BaseSettings):
    name: str = "Quartermaster"
    version: str = "1.0.0"
    title: str = "Military Asset Management"

class BackendSettings(BaseSettings):
    """
    Upstream inventory REST API consumed by the service layer.
    """
    base_url: str = "http://localhost:3000/api"
    timeout_seconds: float = 30.0

class SessionSettings(BaseSettings):
    token_key: str = "token"  # cookie holding the bearer credential
    session_key: str = "qm_session"  # cookie keying notices/notifications
    cookie_secure: bool = False
    cookie_max_age: Optional[int] = 60 * 60 * 24 * 7

class RoutingSettings(BaseSettings):
    """
    Gate configuration. Public paths and guarded pages must stay disjoint;
    see quartermaster.session.guards.check_route_sets.
    """
    login_path: str = "/login"
    public_paths: list[str] = ["/login", "/register", "/forgot-password", "/reset-password"]
    default_landing: str = "/dashboard"
    role_landing: dict[str, str] = {
        "Admin": "/dashboard",
        "BaseCommander": "/assets",
        "LogisticsOfficer": "/assets",
    }
    # Served without consulting the session gate at all.
    exempt_prefixes: list[str] = ["/health", "/docs", "/openapi.json", "/redoc", "/static"]

class CatalogSettings(BaseSettings):
    bases: list[str] = ["Base Alpha", "Base Bravo", "Base Charlie"]
    asset_types: list[str] = ["Vehicle", "Weapon", "Ammunition", "Equipment", "Other"]
    suppliers: list[str] = [
        "Military Supplies Inc.",
        "Tech Defense Systems",
        "Military Outfitters",
        "Ammo Suppliers Ltd.",
        "Military Vehicles Inc.",
    ]
    expenditure_reasons: list[str] = ["Training", "Operation", "Maintenance", "Damaged", "Lost", "Other"]
    activity_actions: list[str] = [
        "Login", "Logout", "Create", "Update", "Delete",
        "Transfer", "Assign", "Return", "Failed Login",
    ]
    activity_resource_types: list[str] = ["User", "Asset", "Assignment", "Transfer", "Purchase", "Expenditure"]

class LoggingSettings(BaseSettings):
    log_requests: bool = True
    level: str = "INFO"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_nested_delimiter="__", env_file=".env", extra="ignore")
    app: AppSettings = AppSettings()
    backend: BackendSettings = BackendSettings()
    session: SessionSettings = SessionSettings()
    routing: RoutingSettings = RoutingSettings()
    catalog: CatalogSettings = CatalogSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        default_path = Path("config/settings.yaml")
        path = config_path or (default_path if default_path.exists() else None)

        if not path:
            return cls()

        with open(path, "r") as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

settings = Settings.load()
