"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..core.bill.client import BASE_URL, REQUEST_TIMEOUT, SANDBOX_BASE_URL

logger = logging.getLogger(__name__)

ENV_PREFIX = "BATON_BILL_"


def _env(name: str, default: str = "") -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.debug(f"Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            logger.warning(f"Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.debug(f"Loaded {env_var} from environment")
            return secret_value

    return None


def _split_ids(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class ConnectorConfig:
    """Connector configuration container."""
    # Bill.com credentials
    username: str = ""
    password: str = field(default="", repr=False)
    organization_ids: list[str] = field(default_factory=list)
    developer_key: str = field(default="", repr=False)

    # HTTP
    base_url: str = BASE_URL
    request_timeout: float = REQUEST_TIMEOUT

    # Snapshot output
    snapshot_path: str = "sync.jsonl"
    snapshot_signing_key: str = field(default="", repr=False)

    # Logging
    log_level: str = "INFO"

    @property
    def sandbox(self) -> bool:
        return self.base_url.rstrip("/") == SANDBOX_BASE_URL


def validate_config(config: ConnectorConfig, require_organizations: bool = True) -> None:
    """Check that every required setting is present.

    Args:
        config: Settings to check
        require_organizations: Organization ids are required (False for discovery)

    Raises:
        ValueError: Naming the first missing setting
    """
    if not config.username:
        raise ValueError("username is missing")

    if not config.password:
        raise ValueError("password is missing")

    if require_organizations and not config.organization_ids:
        raise ValueError("organizationIds are missing")

    if not config.developer_key:
        raise ValueError("developerKey is missing")


def load_settings() -> ConnectorConfig:
    """Load connector settings from environment and /run/secrets.

    Secrets (password, developer key) prefer /run/secrets over the
    environment. The result is not validated; call ``validate_config``.
    """
    password = _load_secret_from_file("bill_password", f"{ENV_PREFIX}PASSWORD") or ""
    developer_key = _load_secret_from_file("bill_developer_key", f"{ENV_PREFIX}DEVELOPER_KEY") or ""
    snapshot_signing_key = _load_secret_from_file(
        "bill_snapshot_signing_key",
        f"{ENV_PREFIX}SNAPSHOT_SIGNING_KEY",
    ) or ""

    sandbox = _env("SANDBOX", "false").lower() == "true"
    base_url = _env("BASE_URL") or (SANDBOX_BASE_URL if sandbox else BASE_URL)

    timeout_raw = _env("REQUEST_TIMEOUT", str(REQUEST_TIMEOUT))
    try:
        request_timeout = float(timeout_raw)
    except ValueError:
        raise RuntimeError(f"{ENV_PREFIX}REQUEST_TIMEOUT must be a number, got {timeout_raw!r}")

    config = ConnectorConfig(
        username=_env("USERNAME"),
        password=password,
        organization_ids=_split_ids(_env("ORGANIZATION_IDS")),
        developer_key=developer_key,
        base_url=base_url,
        request_timeout=request_timeout,
        snapshot_path=_env("SNAPSHOT_PATH", "sync.jsonl"),
        snapshot_signing_key=snapshot_signing_key,
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )

    env_label = "SANDBOX" if config.sandbox else "PRODUCTION"
    logger.info(f"Settings loaded: env={env_label}; organizations={len(config.organization_ids)}")
    return config


def apply_overrides(config: ConnectorConfig, **overrides: Optional[object]) -> ConnectorConfig:
    """Return ``config`` with every non-None override applied (e.g. CLI flags)."""
    for name, value in overrides.items():
        if value is None:
            continue
        if not hasattr(config, name):
            raise AttributeError(f"Unknown setting: {name}")
        setattr(config, name, value)
    return config
