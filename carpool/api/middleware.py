"""Rate limiting shared by every router (slowapi, keyed by client address).

Route decorators take the limit callables below rather than fixed strings,
so the limits follow the ``Settings`` handed to ``create_app``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from carpool.config import Settings, settings

limiter = Limiter(key_func=get_remote_address)

_limits = {"default": settings.rate_limit, "auth": settings.auth_rate_limit}


def configure_limits(app_settings: Settings) -> None:
    _limits["default"] = app_settings.rate_limit
    _limits["auth"] = app_settings.auth_rate_limit


def default_limit() -> str:
    return _limits["default"]


def auth_limit() -> str:
    return _limits["auth"]
