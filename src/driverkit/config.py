# src/driverkit/config.py
"""
Configuration management for driverkit image resolution.

Configuration Hierarchy:
    1. Default values (defined in this module)
    2. Config file (~/.driverkit/config.toml, or an explicit path)
    3. Environment variables (DRIVERKIT_*)
    4. Runtime overrides (e.g. command line flags)

Example TOML configuration:
    [driverkit]
    log_level = "info"
    timeout = 120
    # proxy_url = "http://proxy.local:3128"
    # log_file = "~/.driverkit/driverkit.log"
    target = "ubuntu-generic"
    architecture = "amd64"
    # gcc_version = "8.0.0"

    [driverkit.images]
    images_file = "~/.driverkit/images.yaml"
    repos = ["docker.io/falcosecurity/driverkit"]
    # docker_host = "tcp://docker-host:2375"
"""

import copy
import logging
import os
import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_validator

from .builder.images import ImageSource, ManifestImageSource, PatternCache, RepoImageSource
from .exceptions import ConfigError
from .logging_config import LOG_LEVELS

logger = logging.getLogger(__name__)

ENV_PREFIX = "DRIVERKIT_"
DEFAULT_CONFIG_PATH = Path.home() / ".driverkit" / "config.toml"
DEFAULT_REPOS = ["docker.io/falcosecurity/driverkit"]
MIN_TIMEOUT_SECONDS = 30
PROXY_SCHEMES = ("http", "https", "socks5")

DEFAULT_CONFIG: dict[str, Any] = {
    "log_level": "info",
    "timeout": 120,
    "proxy_url": None,
    "log_file": None,
    "target": None,
    "architecture": "amd64",
    "gcc_version": None,
    "images": {
        "images_file": None,
        "repos": list(DEFAULT_REPOS),
        "docker_host": None,
    },
}


def _stringify(v: Any) -> Any:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return str(v)
    return v


class ConfigOptions(BaseModel):
    """Persistent operator options."""

    config_file: str | None = Field(None, description="Config file the options were read from")
    log_level: str = Field("info", description="Log level name")
    timeout: int = Field(120, ge=MIN_TIMEOUT_SECONDS, description="Timeout in seconds")
    proxy_url: str | None = Field(None, description="Proxy URL for registry access")
    log_file: str | None = Field(None, description="File receiving debug logs")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.strip().lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(sorted(LOG_LEVELS))}")
        return level

    @field_validator("proxy_url", mode="before")
    @classmethod
    def check_proxy_url(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        parsed = urlparse(str(v))
        if parsed.scheme not in PROXY_SCHEMES or not parsed.netloc:
            raise ValueError(f"must be a {'/'.join(PROXY_SCHEMES)} URL with a host")
        return str(v)


class ImagesConfig(BaseModel):
    """Where builder images come from, most trusted first."""

    images_file: str | None = Field(None, description="YAML manifest of builder images")
    repos: list[str] = Field(default_factory=lambda: list(DEFAULT_REPOS))
    docker_host: str | None = Field(None, description="Remote Docker daemon URL")

    @field_validator("repos", mode="before")
    @classmethod
    def coerce_repos(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [r.strip() for r in v.split(",") if r.strip()]
        return v


class DriverkitConfig(BaseModel):
    """Complete driverkit configuration."""

    options: ConfigOptions = Field(default_factory=ConfigOptions)
    images: ImagesConfig = Field(default_factory=ImagesConfig)
    target: str | None = None
    architecture: str = "amd64"
    gcc_version: str | None = None

    @field_validator("target", "architecture", "gcc_version", mode="before")
    @classmethod
    def coerce_strings(cls, v: Any) -> Any:
        return _stringify(v)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in override take precedence. Nested dictionaries are merged recursively.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _parse_env_value(value: str) -> Any:
    """Parse an environment variable value into bool, int, list or string."""
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    if "," in value:
        return [v.strip() for v in value.split(",")]

    return value


def _apply_env_overrides(config: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Environment variables follow the pattern:
        DRIVERKIT_<KEY>=value
        DRIVERKIT_<SECTION>_<KEY>=value

    Examples:
        DRIVERKIT_LOG_LEVEL=debug
        DRIVERKIT_IMAGES_REPOS=docker.io/a/driverkit,docker.io/b/driverkit
    """
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        name = key[len(ENV_PREFIX) :].lower()

        if name in config and not isinstance(config[name], dict):
            config[name] = _parse_env_value(value)
            continue

        section, _, nested_key = name.partition("_")
        if section in config and isinstance(config[section], dict):
            if nested_key in config[section]:
                config[section][nested_key] = _parse_env_value(value)

    return config


def load_toml_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load the ``[driverkit]`` table from a TOML file.

    A missing file yields an empty dict.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path).expanduser()
    if not config_path.exists():
        logger.debug(f"Config file not found: {config_path}")
        return {}

    try:
        with open(config_path, "rb") as f:
            full_config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}")

    logger.debug(f"Loaded config from {config_path}")
    return full_config.get("driverkit", {})


def _format_errors(error: ValidationError) -> list[str]:
    errors = []
    for err in error.errors():
        field = ".".join(str(p) for p in err["loc"] if p != "options")
        errors.append(f"{field}: {err['msg']}")
    return errors


def validate_options(data: dict[str, Any]) -> list[str]:
    """
    Validate operator options.

    Returns:
        Human-readable error messages, empty if the options are valid
    """
    try:
        ConfigOptions.model_validate(data)
    except ValidationError as e:
        return _format_errors(e)
    return []


def load_config(
    config_path: Path | str | None = None,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> DriverkitConfig:
    """
    Load the complete driverkit configuration.

    Configuration is loaded and merged in order:
        1. Default values
        2. TOML config file
        3. Environment variables
        4. Runtime overrides (None values are ignored)

    Raises:
        ConfigError: If the file is unreadable or any value is invalid
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    path = Path(config_path) if config_path else None
    toml_config = load_toml_config(path)
    if toml_config:
        config = _deep_merge(config, toml_config)

    config = _apply_env_overrides(config, environ)

    if overrides:
        config = _deep_merge(config, _drop_none(overrides))

    options = {key: config.get(key) for key in ("log_level", "timeout", "proxy_url", "log_file")}
    options["config_file"] = str(path or DEFAULT_CONFIG_PATH) if toml_config else None

    try:
        return DriverkitConfig(
            options=options,
            images=config.get("images") or {},
            target=config.get("target"),
            architecture=config.get("architecture") or "amd64",
            gcc_version=config.get("gcc_version"),
        )
    except ValidationError as e:
        raise ConfigError("Invalid driverkit configuration:", errors=_format_errors(e))


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = _drop_none(value)
        elif value is not None:
            result[key] = value
    return result


def build_sources(
    config: DriverkitConfig,
    target: str,
    architecture: str,
    pattern_cache: PatternCache | None = None,
    docker_client: Any | None = None,
) -> list[ImageSource]:
    """
    Build the ordered image sources for a request.

    The manifest, when configured, comes first; then one registry source
    per configured repo, in order, all sharing one pattern cache.

    Raises:
        UnsupportedArchitectureError: If the architecture is unknown
    """
    cache = pattern_cache if pattern_cache is not None else PatternCache()
    sources: list[ImageSource] = []

    if config.images.images_file:
        sources.append(ManifestImageSource(Path(config.images.images_file).expanduser()))

    for repo in config.images.repos:
        sources.append(
            RepoImageSource(
                repo,
                target,
                architecture,
                pattern_cache=cache,
                docker_client=docker_client,
                docker_host=config.images.docker_host,
                timeout=config.options.timeout,
                proxy_url=config.options.proxy_url,
            )
        )

    return sources
