"""Config loading for InputGuard.

Reads `.inputguard/config.yaml` (or `~/.inputguard/config.yaml`).
Raises SystemExit on parse errors, a missing `version` field or an unknown
`environment`. If no config file is found, returns default values (safe to
run without config — defaults are the strict production policy).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. INPUTGUARD_CONFIG environment variable (if set)
  3. `.inputguard/config.yaml` (working directory — for development)
  4. `~/.inputguard/config.yaml` (home directory — for deployments)

Environment variable overrides:
  INPUTGUARD_ENV    — overrides environment (production | development | test)
  INPUTGUARD_PORT   — overrides server.port
  INPUTGUARD_CONFIG — sets an explicit config file path to try first

``Config.is_production`` is the only place the production flag comes from.
Validators take it as a parameter; nothing reads it from a request.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import yaml

from inputguard.http.headers import DEFAULT_API_BASE_URL
from inputguard.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

# Current supported config version
SUPPORTED_CONFIG_VERSION = 1

# Set of all supported versions — used for validation in load_config()
SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# ─── Validation sets ─────────────────────────────────────────────────────────

VALID_ENVIRONMENTS: frozenset[str] = frozenset({"production", "development", "test"})

DEFAULT_ENVIRONMENT = "production"

# Default config search paths (INPUTGUARD_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    ".inputguard/config.yaml",
    os.path.expanduser("~/.inputguard/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ServerConfig:
    """HTTP binding configuration."""

    host: str = "127.0.0.1"
    port: int = 8787


@dataclass
class RedirectConfig:
    """Redirect URL Sanitizer settings.

    origin:          This service's public origin; absolute redirects to its
                     host are allowed.
    allowed_domains: Additional hostnames an absolute redirect may target.
    """

    origin: Optional[str] = None
    allowed_domains: list[str] = field(default_factory=list)


@dataclass
class HeadersConfig:
    """Security response header settings."""

    api_base_url: str = DEFAULT_API_BASE_URL  # added to CSP connect-src


@dataclass
class CorsConfig:
    """CORS settings for browser callers of the validation API."""

    allow_origins: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Root configuration object populated from .inputguard/config.yaml.

    All fields have safe defaults — InputGuard can start without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    environment: str = DEFAULT_ENVIRONMENT
    server: ServerConfig = field(default_factory=ServerConfig)
    redirect: RedirectConfig = field(default_factory=RedirectConfig)
    headers: HeadersConfig = field(default_factory=HeadersConfig)
    cors: CorsConfig = field(default_factory=CorsConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Args:
            raw:  Parsed YAML dict (must already be validated for version field).
            path: Path to the config file (stored in Config.path).

        Returns:
            Config with all fields populated from raw + defaults for missing fields.

        Raises:
            SystemExit(1): On an invalid ``environment`` value.
        """
        environment = _validate_environment(
            raw.get("environment", DEFAULT_ENVIRONMENT), source=path or "config"
        )

        # ── Server ────────────────────────────────────────────────────────────
        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 8787),
        )

        # ── Redirect ──────────────────────────────────────────────────────────
        redirect_raw = raw.get("redirect") or {}
        redirect = RedirectConfig(
            origin=redirect_raw.get("origin"),
            allowed_domains=list(redirect_raw.get("allowed_domains") or []),
        )

        # ── Headers ───────────────────────────────────────────────────────────
        headers_raw = raw.get("headers") or {}
        headers = HeadersConfig(
            api_base_url=headers_raw.get("api_base_url", DEFAULT_API_BASE_URL),
        )

        # ── CORS ──────────────────────────────────────────────────────────────
        cors_raw = raw.get("cors") or {}
        cors = CorsConfig(allow_origins=list(cors_raw.get("allow_origins") or []))

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            environment=environment,
            server=server,
            redirect=redirect,
            headers=headers,
            cors=cors,
            path=path,
        )


def _validate_environment(value: object, source: str) -> str:
    if value not in VALID_ENVIRONMENTS:
        msg = (
            f"CONFIG ERROR: Invalid environment in {source}: '{value}'. "
            f"Supported values: {sorted(VALID_ENVIRONMENTS)}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    return str(value)


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate InputGuard configuration.

    Search order:
      1. ``config_path`` argument (if provided — for testing or explicit override)
      2. ``INPUTGUARD_CONFIG`` environment variable (if set)
      3. ``.inputguard/config.yaml`` (current working directory)
      4. ``~/.inputguard/config.yaml`` (home directory)

    If no file is found at any of these paths, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    After loading (or defaulting), ``INPUTGUARD_ENV`` and ``INPUTGUARD_PORT``
    are applied as overrides regardless of whether a config file was found.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, invalid ``environment``, or invalid env override.
    """
    # Build search list
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("INPUTGUARD_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    # Find first existing config file
    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        msg = (
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "InputGuard refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    except OSError as exc:
        msg = f"CONFIG ERROR: Could not read {found_path}: {exc}"
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    # Empty file or non-mapping YAML (e.g. plain scalar)
    if not isinstance(raw, dict):
        if raw is None:
            msg = (
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        else:
            msg = (
                f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
                "The config file must be a YAML dictionary at the top level."
            )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        msg = (
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if version not in SUPPORTED_VERSIONS:
        msg = (
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    # ── Security warnings ─────────────────────────────────────────────────────
    if config.server.host == "0.0.0.0":
        logger.warning(
            "SECURITY WARNING: InputGuard is configured to bind on 0.0.0.0 (all interfaces). "
            "Recommended: use server.host: '127.0.0.1' behind a reverse proxy."
        )
    if not config.is_production:
        logger.warning(
            "Non-production environment — plain http webhook URLs will be accepted",
            environment=config.environment,
        )

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        environment=config.environment,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Handles:
      INPUTGUARD_ENV  — overrides config.environment (SystemExit(1) if unknown)
      INPUTGUARD_PORT — overrides config.server.port (SystemExit(1) if not an integer)
    """
    env_environment = os.environ.get("INPUTGUARD_ENV")
    if env_environment is not None:
        config.environment = _validate_environment(
            env_environment, source="INPUTGUARD_ENV"
        )

    env_port = os.environ.get("INPUTGUARD_PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            msg = (
                f"CONFIG ERROR: INPUTGUARD_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)
