"""Supabase implementations of the directory collaborators.

Each Streamlit browser session gets its own client (see :func:`create_session_client`)
because the auth session lives inside the client instance.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from supabase import Client, create_client

from core.errors import AuthError, StoreError, UploadError
from integrations.protocols import ProfileRow, Session

logger = logging.getLogger(__name__)


def _error_message(error: Exception) -> str:
    """Return the human readable message carried by a Supabase client error."""

    message = getattr(error, "message", None)
    if isinstance(message, str) and message.strip():
        return message.strip()
    return str(error) or error.__class__.__name__


def create_session_client(url: str, key: str) -> Client:
    """Create a Supabase client for a single browser session."""

    return create_client(url, key)


class SupabaseIdentityProvider:
    """Email magic-link authentication backed by Supabase Auth."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def get_current_session(self) -> Session | None:
        try:
            session = self._client.auth.get_session()
        except Exception as exc:
            raise AuthError(_error_message(exc)) from exc
        if session is None or session.user is None:
            return None
        return Session(
            user_id=str(session.user.id),
            email=session.user.email,
            access_token=session.access_token,
        )

    def sign_in_with_email_link(self, email: str, redirect_to: str) -> None:
        try:
            self._client.auth.sign_in_with_otp({"email": email, "options": {"email_redirect_to": redirect_to}})
        except Exception as exc:
            raise AuthError(_error_message(exc)) from exc
        logger.info("Magic link requested")

    def complete_sign_in(self, email: str, token: str) -> Session | None:
        """Exchange the one-time code from the sign-in email for a session."""

        try:
            self._client.auth.verify_otp({"email": email, "token": token, "type": "email"})
        except Exception as exc:
            raise AuthError(_error_message(exc)) from exc
        return self.get_current_session()

    def sign_out(self) -> None:
        try:
            self._client.auth.sign_out()
        except Exception as exc:
            raise AuthError(_error_message(exc)) from exc


class SupabaseProfileStore:
    """Profile rows in a PostgREST table."""

    def __init__(self, client: Client, table: str = "profiles") -> None:
        self._client = client
        self._table = table

    def select_by_owner(self, user_id: str) -> ProfileRow | None:
        try:
            result = self._client.table(self._table).select("*").eq("user_id", user_id).limit(1).execute()
        except Exception as exc:
            raise StoreError(_error_message(exc)) from exc
        rows = result.data or []
        return dict(rows[0]) if rows else None

    def insert(self, record: Mapping[str, Any]) -> ProfileRow:
        try:
            result = self._client.table(self._table).insert(dict(record)).execute()
        except Exception as exc:
            raise StoreError(_error_message(exc)) from exc
        rows = result.data or []
        return dict(rows[0]) if rows else dict(record)

    def update(self, user_id: str, partial: Mapping[str, Any]) -> ProfileRow:
        try:
            result = self._client.table(self._table).update(dict(partial)).eq("user_id", user_id).execute()
        except Exception as exc:
            raise StoreError(_error_message(exc)) from exc
        rows = result.data or []
        return dict(rows[0]) if rows else dict(partial)

    def select_all(self) -> Sequence[ProfileRow]:
        try:
            result = self._client.table(self._table).select("*").order("created_at", desc=True).execute()
        except Exception as exc:
            raise StoreError(_error_message(exc)) from exc
        return [dict(row) for row in result.data or []]


class SupabaseObjectStore:
    """Public storage bucket for profile pictures."""

    def __init__(self, client: Client, bucket: str = "profile-pictures") -> None:
        self._client = client
        self._bucket = bucket

    def upload(
        self,
        path: str,
        payload: bytes,
        *,
        content_type: str = "image/jpeg",
        overwrite: bool = True,
    ) -> None:
        options = {
            "content-type": content_type,
            "cache-control": "3600",
            "upsert": "true" if overwrite else "false",
        }
        try:
            self._client.storage.from_(self._bucket).upload(path=path, file=payload, file_options=options)
        except Exception as exc:
            raise UploadError(f"Failed to upload image: {_error_message(exc)}") from exc

    def get_public_url(self, path: str) -> str:
        try:
            return self._client.storage.from_(self._bucket).get_public_url(path)
        except Exception as exc:
            raise UploadError(f"Failed to get image URL: {_error_message(exc)}") from exc


__all__ = [
    "SupabaseIdentityProvider",
    "SupabaseObjectStore",
    "SupabaseProfileStore",
    "create_session_client",
]
