"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppConfig:
    """Centralized adapter configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Adapter options
    have defaults but can be overridden via environment variables.
    """

    # Required — no defaults, fail at startup if missing
    hostname: str
    client_id: str
    client_secret: str
    username: str
    password: str

    # Adapter options — defaults provided, overridable via env
    root_prefix: str = ""
    return_sharefile_item: bool = False
    timeout_seconds: int = 30


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        SHAREFILE_HOSTNAME: Account hostname (e.g. "acme.sharefile.com").
        SHAREFILE_CLIENT_ID: OAuth client ID.
        SHAREFILE_CLIENT_SECRET: OAuth client secret.
        SHAREFILE_USERNAME: ShareFile user name.
        SHAREFILE_PASSWORD: ShareFile password.

    Optional environment variables (with defaults):
        SHAREFILE_ROOT_PREFIX: Folder prefix applied to every path (default: "").
        SHAREFILE_RETURN_ITEM: Attach the raw ShareFile item to metadata (default: false).
        SHAREFILE_TIMEOUT_SECONDS: HTTP timeout for API calls (default: 30).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        hostname=os.environ["SHAREFILE_HOSTNAME"],
        client_id=os.environ["SHAREFILE_CLIENT_ID"],
        client_secret=os.environ["SHAREFILE_CLIENT_SECRET"],
        username=os.environ["SHAREFILE_USERNAME"],
        password=os.environ["SHAREFILE_PASSWORD"],
        root_prefix=os.environ.get("SHAREFILE_ROOT_PREFIX", ""),
        return_sharefile_item=_env_flag("SHAREFILE_RETURN_ITEM"),
        timeout_seconds=int(os.environ.get("SHAREFILE_TIMEOUT_SECONDS", "30")),
    )
