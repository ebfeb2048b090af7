"""In-process collaborators for local development and tests.

The app falls back to these when no Supabase project is configured. Each class
records the calls it receives and can be told to fail an operation with a
given message, which the wizard then surfaces verbatim.
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Mapping, MutableMapping, Sequence
from uuid import uuid4

from core.errors import AuthError, StoreError, UploadError
from integrations.protocols import ProfileRow, Session


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryIdentityProvider:
    """Identity provider holding at most one session."""

    def __init__(self, session: Session | None = None, *, expected_token: str = "123456") -> None:
        self.session = session
        self.expected_token = expected_token
        self.sent_links: list[tuple[str, str]] = []
        self.fail_with: str | None = None

    def get_current_session(self) -> Session | None:
        if self.fail_with:
            raise AuthError(self.fail_with)
        return self.session

    def sign_in_with_email_link(self, email: str, redirect_to: str) -> None:
        if self.fail_with:
            raise AuthError(self.fail_with)
        self.sent_links.append((email, redirect_to))

    def complete_sign_in(self, email: str, token: str) -> Session | None:
        """Accept ``expected_token`` for any email that was sent a link."""

        if self.fail_with:
            raise AuthError(self.fail_with)
        if token.strip() != self.expected_token or all(sent != email for sent, _ in self.sent_links):
            raise AuthError("Token has expired or is invalid")
        self.session = Session(user_id=f"local-{email.strip().lower()}", email=email)
        return self.session

    def sign_out(self) -> None:
        self.session = None


class InMemoryProfileStore:
    """List-backed profile table keyed by ``user_id`` by convention only."""

    def __init__(self, rows: Sequence[Mapping[str, Any]] | None = None) -> None:
        self.rows: list[ProfileRow] = [dict(row) for row in rows or ()]
        self.calls: list[tuple[str, str | None]] = []
        self.failures: MutableMapping[str, str] = {}

    def _maybe_fail(self, operation: str) -> None:
        message = self.failures.get(operation)
        if message:
            raise StoreError(message)

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    def select_by_owner(self, user_id: str) -> ProfileRow | None:
        self.calls.append(("select_by_owner", user_id))
        self._maybe_fail("select_by_owner")
        for row in self.rows:
            if row.get("user_id") == user_id:
                return deepcopy(row)
        return None

    def insert(self, record: Mapping[str, Any]) -> ProfileRow:
        self.calls.append(("insert", record.get("user_id")))
        self._maybe_fail("insert")
        row = dict(record)
        row.setdefault("id", str(uuid4()))
        row.setdefault("created_at", _utcnow())
        self.rows.append(row)
        return deepcopy(row)

    def update(self, user_id: str, partial: Mapping[str, Any]) -> ProfileRow:
        self.calls.append(("update", user_id))
        self._maybe_fail("update")
        updated: ProfileRow | None = None
        for row in self.rows:
            if row.get("user_id") == user_id:
                row.update(partial)
                updated = row
        if updated is None:
            raise StoreError(f"No profile found for user {user_id}")
        return deepcopy(updated)

    def select_all(self) -> Sequence[ProfileRow]:
        self.calls.append(("select_all", None))
        self._maybe_fail("select_all")
        ordered = sorted(self.rows, key=lambda row: str(row.get("created_at") or ""), reverse=True)
        return [deepcopy(row) for row in ordered]


class InMemoryObjectStore:
    """Dictionary-backed bucket serving objects under ``base_url``."""

    def __init__(self, base_url: str = "memory://profile-pictures") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.uploads: list[str] = []
        self.fail_with: str | None = None

    def upload(
        self,
        path: str,
        payload: bytes,
        *,
        content_type: str = "image/jpeg",
        overwrite: bool = True,
    ) -> None:
        self.uploads.append(path)
        if self.fail_with:
            raise UploadError(self.fail_with)
        if not overwrite and path in self.objects:
            raise UploadError("The resource already exists")
        self.objects[path] = (bytes(payload), content_type)

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"


__all__ = [
    "InMemoryIdentityProvider",
    "InMemoryObjectStore",
    "InMemoryProfileStore",
]
