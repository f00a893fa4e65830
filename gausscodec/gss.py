"""Pluggable GSSAPI (for example Kerberos) authentication providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional


class GSS(ABC):
    """GSSAPI authentication, as used during connection start-up."""

    @abstractmethod
    def get_init_token(self, host: str, service: str) -> bytes:
        """Return the initial token for the given host and service."""

    @abstractmethod
    def get_init_token_from_spn(self, spn: str) -> bytes:
        """Return the initial token for the given service principal name."""

    @abstractmethod
    def continue_(self, in_token: bytes) -> tuple[bool, bytes]:
        """Process a server token; return (done, token to send back)."""


GSSFactory = Callable[[], GSS]

_registry: dict[str, GSSFactory] = {}
_KEY = "gss"


def register_gss_provider(factory: Optional[GSSFactory]) -> None:
    """Register the factory that creates GSS providers; None unregisters it.

    Raises TypeError if the factory is neither None nor callable.
    """
    if factory is None:
        _registry.pop(_KEY, None)
        return
    if not callable(factory):
        raise TypeError(
            f"GSS provider factory must be callable, got {type(factory).__name__}"
        )
    _registry[_KEY] = factory


def gss_provider() -> Optional[GSSFactory]:
    """Return the registered GSS factory, or None if there is none."""
    return _registry.get(_KEY)