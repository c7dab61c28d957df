"""
serves3 gateway - Configuration Loader

Loads environment variables with support for:
- Base .env file (common settings)
- Environment-specific files (.env.local, .env.production)
- APP_ENV variable to control which environment to load

Nothing is read at import time: call ``load_settings()`` once at startup and
share the returned object.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

ENV_PREFIX = "SERVES3_"
BUCKET_PREFIX = ENV_PREFIX + "S3_BUCKET_"


def load_environment(project_root: Optional[Path] = None) -> str:
    """
    Load environment variables from .env files.

    Loading order (later overrides earlier):
    1. .env (base configuration)
    2. .env.{APP_ENV} (environment-specific overrides)
    3. System environment variables (always highest priority)
    """
    if project_root is None:
        project_root = Path.cwd()

    env = os.environ.get("APP_ENV", "local")

    # Snapshot real environment so files never override it
    real_environment = dict(os.environ)

    base_env = project_root / ".env"
    if base_env.exists():
        load_dotenv(base_env, override=False)

    env_file = project_root / f".env.{env}"
    if env_file.exists():
        load_dotenv(env_file, override=True)
        os.environ.update(real_environment)

    os.environ.setdefault("APP_ENV", env)

    return env


def get_env(key: str, default=None, required: bool = False):
    """
    Get environment variable with optional default and required check.

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_bool_env(key: str, default: bool = False) -> bool:
    """
    Get boolean environment variable.

    Values considered True: 'true', '1', 'yes', 'on'
    Values considered False: 'false', '0', 'no', 'off'
    Anything else, including an unset variable, gives the default.
    """
    value = os.getenv(key, "").strip().lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    return default


def get_int_env(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got {value!r}")


class Settings(BaseModel):
    """Gateway settings, immutable once loaded."""
    model_config = ConfigDict(frozen=True)

    # Bucket
    bucket_name: str
    endpoint: str
    region: str = "us-east-1"
    path_style: bool = False
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    # Server
    address: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    environment: str = "development"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


def load_settings(project_root: Optional[Path] = None) -> Settings:
    """Read settings from .env files and the environment."""
    load_environment(project_root)

    return Settings(
        bucket_name=get_env(BUCKET_PREFIX + "NAME", required=True),
        endpoint=get_env(BUCKET_PREFIX + "ENDPOINT", required=True),
        region=get_env(BUCKET_PREFIX + "REGION", "us-east-1"),
        path_style=get_bool_env(BUCKET_PREFIX + "PATH_STYLE", default=False),
        access_key_id=get_env(BUCKET_PREFIX + "ACCESS_KEY_ID"),
        secret_access_key=get_env(BUCKET_PREFIX + "SECRET_ACCESS_KEY"),
        address=get_env(ENV_PREFIX + "ADDRESS", "127.0.0.1"),
        port=get_int_env(ENV_PREFIX + "PORT", 8000),
        log_level=get_env(ENV_PREFIX + "LOG_LEVEL", "INFO").upper(),
        environment=get_env("ENVIRONMENT", "development"),
    )
