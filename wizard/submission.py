"""Turn completed wizard fields into a stored directory profile.

The sequence is best effort and not transactional: picture upload, owner
probe, then insert or update. Two tabs submitting for the same identity at
the same moment can both miss the probe and insert twice; the profiles table
has no unique constraint on ``user_id`` to stop that.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from constants.directory import STUDENT_COMPANY, STUDENT_ROLE
from core.errors import AuthenticationRequiredError, SubmissionInProgressError, ValidationFailed
from core.normalization import compose_cohort, linkedin_url_from_handle
from infra.logging import log_event
from integrations.protocols import IdentityProvider, ObjectStore, ProfileRow, ProfileStore
from models.profile import FormFields, ProfileRecord
from utils.telemetry import traced
from wizard.crop import OUTPUT_MIME, decode_data_uri, is_data_uri
from wizard.validation import validate_all

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def picture_path(user_id: str, now: datetime) -> str:
    """Return the object path for a new picture, namespaced by owner."""

    return f"{user_id}/{int(now.timestamp() * 1000)}.jpg"


def _optional_text(value: str) -> str | None:
    cleaned = value.strip()
    return cleaned or None


def assemble_profile_record(
    fields: FormFields,
    *,
    user_id: str,
    picture_url: str | None,
    now: datetime,
) -> ProfileRecord:
    """Build the stored record from form fields.

    Student members always get the fixed role/company sentinels, whatever the
    role and company fields contain.
    """

    graduation_year = fields.graduation_year.strip()
    return ProfileRecord(
        user_id=user_id,
        name=fields.name.strip(),
        email=fields.email.strip(),
        pledge_class=compose_cohort(fields.cohort_semester, fields.cohort_year),
        role=STUDENT_ROLE if fields.is_student else fields.role.strip(),
        company=STUDENT_COMPANY if fields.is_student else fields.company.strip(),
        sphere=list(fields.spheres),
        location=fields.location.strip(),
        graduation_year=int(graduation_year) if graduation_year else None,
        linkedin_url=linkedin_url_from_handle(fields.linkedin),
        profile_picture_url=picture_url,
        major=_optional_text(fields.major),
        bio=_optional_text(fields.bio),
        updated_at=now.isoformat(),
    )


@dataclass(frozen=True)
class SubmissionResult:
    """Stored record and whether it was newly inserted."""

    record: ProfileRecord
    created: bool


class SubmissionCoordinator:
    """Upload the picture and write the profile for the signed-in member."""

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        store: ProfileStore,
        objects: ObjectStore,
        clock: Clock = _utcnow,
    ) -> None:
        self._identity = identity
        self._store = store
        self._objects = objects
        self._clock = clock
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def submit(self, fields: FormFields) -> SubmissionResult:
        """Persist ``fields`` as the current member's profile.

        Raises:
            SubmissionInProgressError: A submission from this coordinator is still running.
            AuthenticationRequiredError: Nobody is signed in. Nothing was uploaded or written.
            ValidationFailed: A required step is invalid. Nothing was uploaded or written.
            CollaboratorError: The identity provider, object store or profile store
                failed; the message is theirs.
        """

        if self._in_flight:
            raise SubmissionInProgressError()
        self._in_flight = True
        started = time.perf_counter()
        try:
            with traced("directory.submit") as span:
                session = self._identity.get_current_session()
                if session is None:
                    raise AuthenticationRequiredError()
                span.set_attribute("directory.user_id", session.user_id)

                failures = validate_all(fields)
                if failures:
                    step_key, message = next(iter(failures.items()))
                    raise ValidationFailed(step_key, message)

                now = self._clock()
                picture_url = self._resolve_picture(fields.cropped_image, session.user_id, now)
                record = assemble_profile_record(fields, user_id=session.user_id, picture_url=picture_url, now=now)
                row = record.to_row()

                existing = self._store.select_by_owner(session.user_id)
                if existing:
                    stored = self._store.update(session.user_id, row)
                else:
                    stored = self._store.insert(row)
                created = not existing
                span.set_attribute("directory.created", created)
                saved = self._read_back(record, row, stored)
        finally:
            self._in_flight = False

        result = SubmissionResult(record=saved, created=created)
        log_event(
            "info",
            "profile_saved",
            user_id=session.user_id,
            duration=time.perf_counter() - started,
            payload={"created": created, "uploaded_picture": picture_url is not None and is_data_uri(fields.cropped_image)},
        )
        return result

    def _read_back(self, record: ProfileRecord, row: Mapping[str, Any], stored: ProfileRow | None) -> ProfileRecord:
        """Merge the store's returned row over what was written.

        The write already succeeded, so a returned row that does not parse falls
        back to the assembled record instead of failing the submission.
        """

        try:
            return ProfileRecord.model_validate({**row, **(stored or {})})
        except ValidationError as exc:
            logger.warning("Profile store returned an unreadable row: %s", exc.error_count())
            return record

    def _resolve_picture(self, payload: str | None, user_id: str, now: datetime) -> str | None:
        """Upload a freshly cropped data URI; hosted URLs pass through untouched."""

        if not payload:
            return None
        if not is_data_uri(payload):
            return payload
        try:
            data, mime = decode_data_uri(payload)
        except ValueError as exc:
            raise ValidationFailed("profile_picture", "The cropped picture could not be read. Please crop it again.") from exc
        path = picture_path(user_id, now)
        self._objects.upload(path, data, content_type=mime or OUTPUT_MIME, overwrite=True)
        url = self._objects.get_public_url(path)
        logger.debug("Uploaded profile picture to %s", path)
        return url


__all__ = [
    "SubmissionCoordinator",
    "SubmissionResult",
    "assemble_profile_record",
    "picture_path",
]
