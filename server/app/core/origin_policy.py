"""Origin policy gate.

Decides whether a request's declared ``Origin`` is admitted:

* outside production every origin is allowed;
* in production a request without an origin is allowed only while
  ``allow_missing_origin`` is set (non-browser clients, same-origin and
  server-to-server calls send none), and any other origin must be on the
  whitelist.

Everything here is pure so it can be tested without an HTTP stack.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from server.app.config.settings import Settings
from server.app.constants import Environment
from server.app.core.errors import OriginPolicyViolation


class OriginDecision(str, Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"


def decide(
    origin: str | None,
    environment_name: str,
    whitelist: Iterable[str] = (),
    allow_missing_origin: bool = True,
) -> OriginDecision:
    if environment_name != Environment.PRODUCTION:
        return OriginDecision.ALLOW
    if not origin:
        return OriginDecision.ALLOW if allow_missing_origin else OriginDecision.DENY
    if origin in whitelist:
        return OriginDecision.ALLOW
    return OriginDecision.DENY


@dataclass(frozen=True)
class OriginPolicy:
    environment_name: str
    whitelist: tuple[str, ...] = ()
    allow_missing_origin: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "OriginPolicy":
        return cls(
            environment_name=settings.app_env,
            whitelist=tuple(settings.cors_whitelist),
            allow_missing_origin=settings.cors_allow_missing_origin,
        )

    def decide(self, origin: str | None) -> OriginDecision:
        return decide(origin, self.environment_name, self.whitelist, self.allow_missing_origin)

    def enforce(self, origin: str | None) -> None:
        """Raise :class:`OriginPolicyViolation` when ``origin`` is denied."""
        if self.decide(origin) is OriginDecision.DENY:
            raise OriginPolicyViolation(origin or "", self.environment_name)
