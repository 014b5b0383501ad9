"""Config loading for GreenGate.

Reads `.greengate/config.yaml` (or `~/.greengate/config.yaml`).
Raises SystemExit on parse errors or missing `version` field.
If no config file is found, returns default values (credentials then come
from the environment).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. GREENGATE_CONFIG environment variable (if set)
  3. `.greengate/config.yaml` (working directory — for development)
  4. `~/.greengate/config.yaml` (home directory — for production deployments)

Environment variable overrides (applied after the file):
  GREENGATE_ACCESS_KEY_ID      — overrides green.access_key_id
  GREENGATE_SECRET_ACCESS_KEY  — overrides green.secret_access_key
  GREENGATE_REGION             — overrides green.region
  GREENGATE_PORT               — overrides service.port

The forum's own settings store can be used instead through
``Config.from_reader()``, which looks up the ``aliGreenConfig:*`` keys.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Callable, NoReturn, Optional

import yaml

from greengate.constants import (
    CONFIG_KEY_ACCESS_KEY_ID,
    CONFIG_KEY_REGION,
    CONFIG_KEY_SECRET_ACCESS_KEY,
    GREEN_ENDPOINT_TEMPLATE,
)
from greengate.utils.logger import get_logger

logger = get_logger(__name__)

#: Key → string lookup supplied by the host (e.g. a settings store accessor).
ConfigReader = Callable[[str], Optional[str]]

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_REGION = "shanghai"

# Default config search paths (GREENGATE_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    ".greengate/config.yaml",
    os.path.expanduser("~/.greengate/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Credentials:
    """Aliyun access key pair and region. Immutable for the process lifetime.

    access_key_id:     AccessKey ID — sent in the ``authorization`` header.
    access_key_secret: AccessKey secret — HMAC key; never sent, never logged.
    region:            Bare region name, e.g. "shanghai" → cn-shanghai.
    """

    access_key_id: str = ""
    access_key_secret: str = field(default="", repr=False)
    region: str = DEFAULT_REGION

    @property
    def endpoint(self) -> str:
        return GREEN_ENDPOINT_TEMPLATE.format(region=self.region)

    @property
    def configured(self) -> bool:
        return bool(self.access_key_id and self.access_key_secret)


@dataclass
class ServiceConfig:
    """Hook service binding configuration."""

    host: str = "127.0.0.1"
    port: int = 4343


@dataclass
class Config:
    """Root configuration object populated from .greengate/config.yaml.

    All fields have safe defaults — GreenGate can start without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    green: Credentials = field(default_factory=Credentials)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    path: Optional[str] = None

    @classmethod
    def defaults(cls) -> "Config":
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.
        """
        green_raw = raw.get("green") or {}
        green = Credentials(
            access_key_id=str(green_raw.get("access_key_id", "")),
            access_key_secret=str(green_raw.get("secret_access_key", "")),
            region=str(green_raw.get("region", DEFAULT_REGION)),
        )

        service_raw = raw.get("service") or {}
        service = ServiceConfig(
            host=service_raw.get("host", "127.0.0.1"),
            port=service_raw.get("port", 4343),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            green=green,
            service=service,
            path=path,
        )

    @classmethod
    def from_reader(cls, reader: ConfigReader) -> "Config":
        """Build a Config from a key → string lookup using the forum's keys.

        Reads ``aliGreenConfig:ACCESS_KEY_ID``, ``aliGreenConfig:SECRET_ACCESS_KEY``
        and ``aliGreenConfig:REGION``. Missing keys fall back to defaults.
        """
        green = Credentials(
            access_key_id=reader(CONFIG_KEY_ACCESS_KEY_ID) or "",
            access_key_secret=reader(CONFIG_KEY_SECRET_ACCESS_KEY) or "",
            region=reader(CONFIG_KEY_REGION) or DEFAULT_REGION,
        )
        return cls(green=green)


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate GreenGate configuration.

    No file at any search path is not an error: defaults are used and the
    credentials are expected from the environment. Environment overrides are
    applied in both cases.

    Raises:
        SystemExit(1): On YAML parse error, missing or unsupported ``version``,
                       or invalid ``GREENGATE_PORT``.
    """
    path = _find_config_file(config_path)
    if path is None:
        logger.info("No config file found, using defaults")
        config = Config.defaults()
    else:
        config = Config.from_dict(_read_config_file(path), path=path)

    config = _apply_env_overrides(config)
    if config.service.host == "0.0.0.0":
        logger.warning(
            "Hook service bound on 0.0.0.0; hook endpoints are unauthenticated",
            host=config.service.host,
            port=config.service.port,
        )
    _warn_missing_credentials(config)
    logger.info("Config loaded", path=path, region=config.green.region)
    return config


def _find_config_file(config_path: Optional[str]) -> Optional[str]:
    """First existing file among the explicit path, $GREENGATE_CONFIG and the defaults."""
    candidates = [config_path, os.environ.get("GREENGATE_CONFIG"), *DEFAULT_CONFIG_PATHS]
    for candidate in filter(None, candidates):
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            return expanded
    return None


def _config_error(message: str) -> NoReturn:
    print(f"CONFIG ERROR: {message}", file=sys.stderr)
    raise SystemExit(1)


def _read_config_file(path: str) -> dict:
    """Parse ``path`` and check its ``version``; exits on anything unusable."""
    try:
        with open(path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _config_error(f"Failed to parse {path}: {exc}")
    except OSError as exc:
        _config_error(f"Could not read {path}: {exc}")

    if raw is not None and not isinstance(raw, dict):
        _config_error(f"{path} is not a valid YAML mapping.")
    version = (raw or {}).get("version")
    if version is None:
        _config_error(f"{path} is missing the required 'version' field. Add 'version: 1'.")
    if version not in SUPPORTED_VERSIONS:
        _config_error(
            f"Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
    return raw


def _apply_env_overrides(config: Config) -> Config:
    """Return ``config`` with environment variable overrides applied.

    ``Credentials`` is frozen, so a replacement instance is built when any
    GREENGATE_* credential variable is set.

    Raises:
        SystemExit(1): If GREENGATE_PORT is set but not a valid integer.
    """
    green = config.green
    key_id = os.environ.get("GREENGATE_ACCESS_KEY_ID")
    secret = os.environ.get("GREENGATE_SECRET_ACCESS_KEY")
    region = os.environ.get("GREENGATE_REGION")
    if key_id is not None or secret is not None or region is not None:
        config.green = Credentials(
            access_key_id=key_id if key_id is not None else green.access_key_id,
            access_key_secret=secret if secret is not None else green.access_key_secret,
            region=region if region is not None else green.region,
        )

    env_port = os.environ.get("GREENGATE_PORT")
    if env_port is not None:
        try:
            config.service.port = int(env_port)
        except ValueError:
            _config_error(f"GREENGATE_PORT is not a valid integer: '{env_port}'")
    return config


def _warn_missing_credentials(config: Config) -> None:
    if not config.green.configured:
        logger.warning(
            "Green credentials not configured; every check will fail with scan_fail",
            region=config.green.region,
        )
