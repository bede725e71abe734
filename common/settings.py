import os
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator, ValidationError

_TRUTHY = ("1", "true", "yes", "on")


class DB(BaseModel):
    driver: str = "sqlite"
    sqlite_path: str = "data/dev.db"
    name: str = "root"
    user: str = "root"
    password: str = "password"
    host: str = "localhost"
    port: int = 5432
    ssl: bool = False
    pool_size: int = 5

    @field_validator("driver")
    @classmethod
    def known_driver(cls, v: str) -> str:
        v = (v or "").lower()
        if v in ("postgresql", "pg"):
            v = "postgres"
        if v not in ("sqlite", "postgres"):
            raise ValueError(f"unsupported db driver {v!r}")
        return v


class API(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]
    max_limit: int = 1000
    # create the table and apply migrations on startup; off for read only db users
    migrate_on_start: bool = True


class Demo(BaseModel):
    # synthetic block/gas fields are only emitted in demo mode
    enabled: bool = True


class Dashboard(BaseModel):
    api_url: str = "http://localhost:3000"
    poll_seconds: int = 30

    @field_validator("api_url")
    @classmethod
    def with_scheme(cls, v: str) -> str:
        v = v.rstrip("/")
        if "://" not in v:
            v = "http://" + v
        return v

    @field_validator("poll_seconds")
    @classmethod
    def poll_window(cls, v: int) -> int:
        if v < 15 or v > 60:
            raise ValueError("poll_seconds must be between 15 and 60")
        return v


class Settings(BaseModel):
    network: str = "ethereum"
    log_level: str = "INFO"
    db: DB = DB()
    api: API = API()
    demo: Demo = Demo()
    dashboard: Dashboard = Dashboard()
    # lowercase token address -> symbol, merged over the built-in table
    tokens: Dict[str, str] = {}


def _env_overrides(cfg: dict) -> dict:
    db = cfg.setdefault("db", {}) or {}
    cfg["db"] = db
    # unresolved ${VAR} placeholders fall back to model defaults
    for k in [k for k, v in db.items() if isinstance(v, str) and "${" in v]:
        db.pop(k)
    env_map = {
        "DB_DRIVER": "driver",
        "SQLITE_PATH": "sqlite_path",
        "DB_NAME": "name",
        "DB_USER": "user",
        "DB_PASSWORD": "password",
        "DB_HOST": "host",
        "DB_PORT": "port",
    }
    for env, key in env_map.items():
        v = os.environ.get(env)
        if v:
            db[key] = v
    ssl = os.environ.get("DB_SSL")
    if ssl:
        db["ssl"] = ssl.lower() in _TRUTHY

    demo = os.environ.get("INDEXER_DEMO_MODE")
    if demo:
        cfg.setdefault("demo", {})
        cfg["demo"] = {**(cfg["demo"] or {}), "enabled": demo.lower() in _TRUTHY}

    level = os.environ.get("LOG_LEVEL")
    if level:
        cfg["log_level"] = level.upper()

    api_url = (
        os.environ.get("INDEXER_API_URL")
        or os.environ.get("NEXT_PUBLIC_BACKEND_API_URL")
        or os.environ.get("NEXT_PUBLIC_API_URL")
    )
    if api_url:
        cfg["dashboard"] = {**(cfg.get("dashboard") or {}), "api_url": api_url}
    return cfg


def load_settings(path: Optional[str] = "config.yaml") -> Settings:
    """
    Read config.yaml (missing file means defaults), then apply env overrides.
    """
    import yaml

    cfg: dict = {}
    if path and os.path.exists(path):
        with open(path, "r") as f:
            cfg = yaml.safe_load(f) or {}

    cfg = _env_overrides(cfg)

    try:
        return Settings.model_validate(cfg)
    except ValidationError as e:
        raise RuntimeError(f"Configuration error in {path}: {e}") from e
