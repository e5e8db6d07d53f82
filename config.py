"""
config.py

Responsibility: Holds the ClouDNS credentials and request-rate settings and
validates their shape before any Reconciler is built.
Does NOT: make HTTP calls or persist anything.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_AUTH_ID = "CLOUDNS_AUTH_ID"
ENV_SUB_AUTH_ID = "CLOUDNS_SUB_AUTH_ID"
ENV_PASSWORD = "CLOUDNS_PASSWORD"
ENV_REQUESTS_PER_SECOND = "CLOUDNS_REQUESTS_PER_SECOND"

DEFAULT_REQUESTS_PER_SECOND = 5


@dataclass(frozen=True)
class ProviderSettings:
    """
    Validated ClouDNS API settings.

    auth_id is used by API users, sub_auth_id by API sub-users; exactly one
    of them must be set. Construction raises ConfigurationError otherwise.
    """

    auth_id: int | None
    sub_auth_id: int | None
    password: str
    requests_per_second: int = DEFAULT_REQUESTS_PER_SECOND

    def __post_init__(self) -> None:
        if not self.password:
            raise ConfigurationError("Expected password to be defined but it wasn't")

        if (self.auth_id is not None) == (self.sub_auth_id is not None):
            state = "defined" if self.auth_id is not None else "not defined"
            raise ConfigurationError(
                f"Exactly one of auth_id or sub_auth_id must be set, but both were {state}"
            )

        for name in ("auth_id", "sub_auth_id", "requests_per_second"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value}")

    def auth_params(self) -> dict[str, str]:
        """
        Returns the credential query parameters ClouDNS expects on every call.

        Returns:
            {"auth-id" | "sub-auth-id": ..., "auth-password": ...}
        """
        if self.auth_id is not None:
            return {"auth-id": str(self.auth_id), "auth-password": self.password}
        return {"sub-auth-id": str(self.sub_auth_id), "auth-password": self.password}


def load_settings(
    auth_id: int | None = None,
    sub_auth_id: int | None = None,
    password: str | None = None,
    requests_per_second: int | None = None,
    environ: Mapping[str, str] | None = None,
) -> ProviderSettings:
    """
    Builds ProviderSettings from explicit values, falling back to the environment.

    Args:
        auth_id: API user id; defaults to $CLOUDNS_AUTH_ID.
        sub_auth_id: API sub-user id; defaults to $CLOUDNS_SUB_AUTH_ID.
        password: API password; defaults to $CLOUDNS_PASSWORD.
        requests_per_second: Outbound call ceiling; defaults to
            $CLOUDNS_REQUESTS_PER_SECOND, then 5.
        environ: Environment mapping to read (os.environ when None).

    Returns:
        Validated ProviderSettings.

    Raises:
        ConfigurationError: If the resulting settings are not usable.
    """
    env = os.environ if environ is None else environ

    if auth_id is None:
        auth_id = _int_from_env(env, ENV_AUTH_ID)
    if sub_auth_id is None:
        sub_auth_id = _int_from_env(env, ENV_SUB_AUTH_ID)
    if password is None:
        password = env.get(ENV_PASSWORD, "")
    if requests_per_second is None:
        requests_per_second = _int_from_env(env, ENV_REQUESTS_PER_SECOND)
        if requests_per_second is None:
            requests_per_second = DEFAULT_REQUESTS_PER_SECOND

    settings = ProviderSettings(
        auth_id=auth_id,
        sub_auth_id=sub_auth_id,
        password=password,
        requests_per_second=requests_per_second,
    )
    logger.debug(
        "Loaded ClouDNS settings (%s, %d req/s)",
        "auth-id" if settings.auth_id is not None else "sub-auth-id",
        settings.requests_per_second,
    )
    return settings


def _int_from_env(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
