"""
FrameSlice Configuration
========================

This module handles configuration loading for the slice service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    SLICE_JPEG_QUALITY         -> compression.default_quality
    SLICE_MIN_JPEG_QUALITY     -> compression.min_quality
    SLICE_TARGET_KB            -> compression.target_kb
    KLAVIYO_REVISION           -> upload.revision
    FRAMESLICE_UPLOAD_BACKEND  -> upload.backend
    KLAVIYO_API_KEY            -> accounts.default_api_key
    KLAVIYO_PRIVATE_KEY        -> accounts.default_api_key (if the above is unset)
    KLAVIYO_ACCOUNTS           -> accounts.bindings (comma-separated ids, each
                                  read from KLAVIYO_API_KEY_<ID>)
    FRAMESLICE_LOG_LEVEL       -> logging.level
    PORT                       -> server.port

Example:
    from frameslice.config import settings

    print(settings.compression.target_kb)
    print(settings.account_ids())
"""

import os
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from frameslice.upload.credentials import binding_key, normalize_account_id


logger = logging.getLogger(__name__)


def _normalize_bindings(bindings: Mapping[str, str]) -> Dict[str, str]:
    """Normalize account ids; first occurrence wins, empty ids and keys are dropped."""
    normalized: Dict[str, str] = {}
    for raw_id, key in bindings.items():
        account_id = normalize_account_id(raw_id)
        if account_id and key and account_id not in normalized:
            normalized[account_id] = key
    return normalized


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification."""

    name: str = Field(default="frameslice", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")
    mode: str = Field(default="v11-upload-only", description="Mode label echoed to clients")


class CompressionConfig(BaseModel):
    """Adaptive compression settings."""

    default_quality: int = Field(
        default=80,
        ge=1,
        le=100,
        description="First JPEG quality tried",
    )
    min_quality: int = Field(
        default=60,
        ge=1,
        le=100,
        description="JPEG quality floor",
    )
    target_kb: float = Field(
        default=250,
        gt=0,
        description="Target size per slice in KB",
    )
    quality_step: int = Field(
        default=5,
        ge=1,
        description="Quality decrement per retry",
    )

    @model_validator(mode="after")
    def check_quality_range(self) -> "CompressionConfig":
        if self.min_quality > self.default_quality:
            raise ValueError("min_quality must not exceed default_quality")
        return self


class UploadConfig(BaseModel):
    """Image upload backend configuration."""

    backend: str = Field(
        default="klaviyo",
        description="Upload backend: 'klaviyo' or 'mock'",
    )
    endpoint: str = Field(
        default="https://a.klaviyo.com/api/images/",
        description="Images API endpoint",
    )
    revision: str = Field(default="2025-10-15", description="Klaviyo API revision")
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Transport timeout per upload request",
    )
    mock_base_url: str = Field(
        default="https://images.example.test",
        description="URL prefix used by the mock backend",
    )


class AccountsConfig(BaseModel):
    """Account -> API key bindings."""

    default_api_key: Optional[str] = Field(
        default=None,
        description="Key used when a request names no account",
    )
    default_source: str = Field(
        default="KLAVIYO_API_KEY",
        description="Name reported for the default key",
    )
    bindings: Dict[str, str] = Field(
        default_factory=dict,
        description="Normalized account id -> API key, in configured order",
    )

    @field_validator("bindings")
    @classmethod
    def normalize_bindings(cls, v: Mapping[str, str]) -> Dict[str, str]:
        return _normalize_bindings(v)


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8787, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for FrameSlice.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    compression: CompressionConfig = Field(default_factory=CompressionConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    accounts: AccountsConfig = Field(default_factory=AccountsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def account_ids(self) -> List[str]:
        """Configured account ids in order."""
        return list(self.accounts.bindings)

    def listed_accounts(self) -> List[str]:
        """Account ids offered to clients, "default" first when a default key exists."""
        ids = self.account_ids()
        if self.accounts.default_api_key:
            return ["default"] + [a for a in ids if a != "default"]
        return ids


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Settings: Loaded configuration
    """
    if environ is None:
        environ = os.environ

    # Find config file
    if config_path is None:
        search_paths = [
            Path(environ.get("FRAMESLICE_CONFIG", "config.yaml")),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    # Apply environment variable overrides
    _apply_env_overrides(config_data, environ)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict, environ: Mapping[str, str]) -> None:
    """Apply environment variable overrides to config data."""

    # Compression settings
    if env_q := environ.get("SLICE_JPEG_QUALITY"):
        config_data.setdefault("compression", {})["default_quality"] = int(env_q)
    if env_min := environ.get("SLICE_MIN_JPEG_QUALITY"):
        config_data.setdefault("compression", {})["min_quality"] = int(env_min)
    if env_kb := environ.get("SLICE_TARGET_KB"):
        config_data.setdefault("compression", {})["target_kb"] = float(env_kb)

    # Upload settings
    if env_rev := environ.get("KLAVIYO_REVISION"):
        config_data.setdefault("upload", {})["revision"] = env_rev
    if env_backend := environ.get("FRAMESLICE_UPLOAD_BACKEND"):
        config_data.setdefault("upload", {})["backend"] = env_backend

    # Default key
    if env_key := environ.get("KLAVIYO_API_KEY"):
        accounts = config_data.setdefault("accounts", {})
        accounts["default_api_key"] = env_key
        accounts["default_source"] = "KLAVIYO_API_KEY"
    elif env_key := environ.get("KLAVIYO_PRIVATE_KEY"):
        accounts = config_data.setdefault("accounts", {})
        accounts["default_api_key"] = env_key
        accounts["default_source"] = "KLAVIYO_PRIVATE_KEY"

    # Per-account keys
    if env_accounts := environ.get("KLAVIYO_ACCOUNTS"):
        accounts = config_data.setdefault("accounts", {})
        keys = _normalize_bindings(accounts.get("bindings") or {})
        accounts["bindings"] = keys
        for raw_id in env_accounts.split(","):
            account_id = normalize_account_id(raw_id)
            if not account_id:
                continue
            key = environ.get(binding_key(account_id))
            if key:
                keys[account_id] = key
            else:
                logger.warning(
                    f"Account {account_id!r} listed in KLAVIYO_ACCOUNTS but "
                    f"{binding_key(account_id)} is not set"
                )

    # Server settings
    if env_port := environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := environ.get("FRAMESLICE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
