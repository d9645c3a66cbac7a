"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..models import GROUP_FIELDS, USER_FIELDS
from ..transport import GRAPH_BASE_URI, GRAPH_SCOPE, LOGIN_AUTHORITY, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


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
                logger.debug("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.debug("Loaded %s from environment", env_var)
            return secret_value

    return None


def _require(var_name: str, value: Optional[str]) -> str:
    if not value:
        raise RuntimeError(f"Environment variable {var_name} is required.")
    return value


@dataclass
class GraphSettings:
    """Directory client configuration container."""
    tenant_id: str
    client_id: str
    client_secret: str = field(repr=False)
    base_uri: str = GRAPH_BASE_URI
    authority: str = LOGIN_AUTHORITY
    scope: str = GRAPH_SCOPE
    request_timeout: float = REQUEST_TIMEOUT
    user_fields: list[str] = field(default_factory=lambda: list(USER_FIELDS))
    group_fields: list[str] = field(default_factory=lambda: list(GROUP_FIELDS))


def load_settings(
    tenant_id: Optional[str] = None,
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    base_uri: Optional[str] = None,
) -> GraphSettings:
    """Load directory client settings from the environment and /run/secrets.

    Explicit arguments take precedence over the environment.

    Raises:
        RuntimeError: If tenant, client ID or client secret is missing
        ValueError: If GRAPH_REQUEST_TIMEOUT is not a number
    """
    tenant_id = _require("AZURE_TENANT_ID", tenant_id or os.environ.get("AZURE_TENANT_ID"))
    client_id = _require("AZURE_CLIENT_ID", client_id or os.environ.get("AZURE_CLIENT_ID"))
    client_secret = _require(
        "AZURE_CLIENT_SECRET",
        client_secret or _load_secret_from_file("azure_client_secret", "AZURE_CLIENT_SECRET"),
    )

    timeout_raw = os.environ.get("GRAPH_REQUEST_TIMEOUT", "").strip()
    try:
        request_timeout = float(timeout_raw) if timeout_raw else float(REQUEST_TIMEOUT)
    except ValueError:
        raise ValueError(f"GRAPH_REQUEST_TIMEOUT must be a number, got {timeout_raw!r}") from None

    return GraphSettings(
        tenant_id=tenant_id,
        client_id=client_id,
        client_secret=client_secret,
        base_uri=base_uri or os.environ.get("GRAPH_BASE_URI", GRAPH_BASE_URI),
        request_timeout=request_timeout,
    )
