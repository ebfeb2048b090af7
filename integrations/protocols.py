"""Interfaces of the external services the wizard talks to.

Implementations are injected into the wizard shell and submission coordinator;
nothing in the wizard reaches for a module-level client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

ProfileRow = dict[str, Any]


@dataclass(frozen=True)
class Session:
    """Authenticated identity as reported by the identity provider."""

    user_id: str
    email: str | None = None
    access_token: str | None = None


@runtime_checkable
class IdentityProvider(Protocol):
    def get_current_session(self) -> Session | None:
        """Return the active session or ``None`` when signed out."""

    def sign_in_with_email_link(self, email: str, redirect_to: str) -> None:
        """Send a magic sign-in link to ``email``. No session is returned directly."""

    def sign_out(self) -> None: ...


@runtime_checkable
class ProfileStore(Protocol):
    def select_by_owner(self, user_id: str) -> ProfileRow | None:
        """Return the profile owned by ``user_id`` or ``None``."""

    def insert(self, record: Mapping[str, Any]) -> ProfileRow: ...

    def update(self, user_id: str, partial: Mapping[str, Any]) -> ProfileRow: ...

    def select_all(self) -> Sequence[ProfileRow]:
        """Return every profile, newest ``created_at`` first."""


@runtime_checkable
class ObjectStore(Protocol):
    def upload(
        self,
        path: str,
        payload: bytes,
        *,
        content_type: str = "image/jpeg",
        overwrite: bool = True,
    ) -> None: ...

    def get_public_url(self, path: str) -> str: ...


@runtime_checkable
class AnalyticsSink(Protocol):
    def capture(self, event: str, properties: Mapping[str, Any] | None = None) -> None:
        """Record ``event``. Must never raise into the caller."""


__all__ = [
    "AnalyticsSink",
    "IdentityProvider",
    "ObjectStore",
    "ProfileRow",
    "ProfileStore",
    "Session",
]
