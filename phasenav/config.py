"""
Settings loading - defaults, then a YAML file, then PHASENAV_* variables.

The .env file in the working directory is loaded with python-dotenv before
the environment is read, so local overrides never need exporting.
"""

import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from phasenav.utils.yaml_loader import load_yaml


DEFAULT_DATA_DIR = Path.home() / ".phasenav"
DEFAULT_CONFIG_FILE = Path("phasenav.yaml")
ENV_PREFIX = "PHASENAV_"


class Settings(BaseModel):
    """Runtime configuration for the navigator and its collaborators."""

    mode: Literal["local", "gateway"] = "local"
    progress_db: Path = DEFAULT_DATA_DIR / "progress.db"
    storage_key: str = "ecommerceProjectProgress"
    page_url: str = "http://localhost:8000/BRD_phase/Overview.html"
    content_region_class: str = "content-body"
    request_timeout: float = 30.0

    # Gateway mode
    api_base: Optional[str] = None
    project_id: Optional[str] = None
    token: Optional[str] = None
    production_hosts: list[str] = ["gnanamai.com", "www.gnanamai.com"]
    production_api_host: str = "api.gnanamai.com"
    local_hosts: list[str] = ["localhost", "127.0.0.1"]
    local_backend_port: int = 5000
    gateway_path_prefix: str = "/api/realtime-projects/"

    curriculum_file: Optional[Path] = None
    log_level: str = "INFO"

    @field_validator("production_hosts", "local_hosts", mode="before")
    @classmethod
    def _split_hosts(cls, value):
        if isinstance(value, str):
            return [host.strip() for host in value.split(",") if host.strip()]
        return value

    @field_validator("api_base", "project_id", "token", "curriculum_file", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build settings from all configuration sources.

    Args:
        config_path: Explicit YAML file (default: $PHASENAV_CONFIG or ./phasenav.yaml)
        environ: Environment mapping; when omitted, .env is loaded and os.environ is used

    Returns:
        Validated Settings
    """
    if environ is None:
        load_dotenv(Path.cwd() / ".env")
        environ = os.environ

    path = config_path
    if path is None and environ.get(f"{ENV_PREFIX}CONFIG"):
        path = Path(environ[f"{ENV_PREFIX}CONFIG"])
    if path is None and DEFAULT_CONFIG_FILE.exists():
        path = DEFAULT_CONFIG_FILE

    data: dict = load_yaml(path) if path is not None else {}

    for field_name in Settings.model_fields:
        key = f"{ENV_PREFIX}{field_name.upper()}"
        if key in environ:
            data[field_name] = environ[key]

    return Settings(**data)
