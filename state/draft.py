"""Single-slot draft persistence for the join/edit wizard.

The wizard saves a snapshot when the page is hidden and consumes it on the
next mount. There is exactly one slot; saving again overwrites it and loading
deletes it.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
from collections.abc import Callable, MutableMapping
from pathlib import Path
from typing import Any, Mapping, Protocol
from uuid import uuid4

import streamlit as st
from pydantic import ValidationError

from constants.keys import DRAFT_KEY
from models.profile import FormFields
from wizard.crop import decode_data_uri, encode_data_uri
from wizard.state import CropArea, CropState, WizardState

logger = logging.getLogger(__name__)

DraftPayload = dict[str, Any]

# Raw uploads larger than this are left out of the draft; the cropper then reopens empty.
RAW_IMAGE_DRAFT_LIMIT = 4 * 1024 * 1024

DEFAULT_DRAFT_TTL_SECONDS = 24 * 60 * 60

_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def _coerce_int(value: object, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _coerce_float(value: object, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def _area_payload(area: CropArea | None) -> dict[str, int] | None:
    if area is None:
        return None
    return {"x": area.x, "y": area.y, "width": area.width, "height": area.height}


def _parse_area(value: object) -> CropArea | None:
    if not isinstance(value, Mapping):
        return None
    try:
        area = CropArea(
            x=_coerce_int(value.get("x")),
            y=_coerce_int(value.get("y")),
            width=_coerce_int(value.get("width")),
            height=_coerce_int(value.get("height")),
        )
    except TypeError:
        return None
    if area.width <= 0 or area.height <= 0:
        return None
    return area


def build_snapshot(state: WizardState) -> DraftPayload:
    """Return a JSON-ready snapshot of ``state``."""

    fields = state.fields.serializable()
    raw = state.fields.raw_image
    if raw is not None and len(raw) <= RAW_IMAGE_DRAFT_LIMIT:
        fields["raw_image"] = encode_data_uri(raw, "application/octet-stream")
    return {
        "ownerId": state.owner_id,
        "stepIndex": state.step_index,
        "formFields": fields,
        "crop": {
            "offsetX": state.crop.offset_x,
            "offsetY": state.crop.offset_y,
            "zoom": state.crop.zoom,
            "area": _area_payload(state.crop.area),
            "isOpen": state.crop.is_open,
        },
    }


def parse_snapshot(payload: Mapping[str, Any]) -> WizardState:
    """Rebuild a :class:`WizardState` from a snapshot.

    Raises:
        ValueError: When the payload does not describe a wizard state.
    """

    fields_raw = payload.get("formFields")
    if not isinstance(fields_raw, Mapping):
        raise ValueError("Draft is missing form fields")
    fields_data = dict(fields_raw)
    raw_image: bytes | None = None
    encoded_raw = fields_data.pop("raw_image", None)
    if isinstance(encoded_raw, str):
        try:
            raw_image, _mime = decode_data_uri(encoded_raw)
        except ValueError:
            logger.info("Dropping unreadable raw image from draft")
    try:
        fields = FormFields.model_validate(fields_data)
    except ValidationError as exc:
        raise ValueError(f"Draft form fields are invalid: {exc.error_count()} error(s)") from exc
    fields.raw_image = raw_image

    crop_raw = payload.get("crop")
    crop_data: Mapping[str, Any] = crop_raw if isinstance(crop_raw, Mapping) else {}
    crop = CropState(
        offset_x=_coerce_float(crop_data.get("offsetX"), 0.0),
        offset_y=_coerce_float(crop_data.get("offsetY"), 0.0),
        zoom=_coerce_float(crop_data.get("zoom"), 1.0),
        area=_parse_area(crop_data.get("area")),
        is_open=bool(crop_data.get("isOpen")) and raw_image is not None,
    )
    owner_raw = payload.get("ownerId")
    return WizardState(
        step_index=max(0, _coerce_int(payload.get("stepIndex"))),
        fields=fields,
        crop=crop,
        owner_id=owner_raw if isinstance(owner_raw, str) and owner_raw else None,
    )


def serialize_snapshot(snapshot: Mapping[str, Any]) -> str:
    return json.dumps(snapshot, ensure_ascii=False)


def deserialize_snapshot(raw: str | bytes) -> WizardState | None:
    """Parse a stored draft, returning ``None`` for corrupt payloads."""

    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Discarding unreadable wizard draft: %s", exc)
        return None
    if not isinstance(payload, Mapping):
        logger.warning("Discarding wizard draft with unexpected shape")
        return None
    try:
        return parse_snapshot(payload)
    except ValueError as exc:
        logger.warning("Discarding invalid wizard draft: %s", exc)
        return None


class DraftStore(Protocol):
    def save(self, state: WizardState) -> None: ...

    def has_draft(self) -> bool: ...

    def load(self) -> WizardState | None:
        """Return the saved state and delete the slot."""

    def clear(self) -> None: ...


class SessionDraftStore:
    """Draft slot inside a session-scoped mapping (``st.session_state`` by default)."""

    def __init__(self, storage: MutableMapping[str, Any] | None = None, *, key: str = DRAFT_KEY) -> None:
        self._storage = storage
        self._key = key

    @property
    def storage(self) -> MutableMapping[str, Any]:
        if self._storage is not None:
            return self._storage
        return st.session_state

    def save(self, state: WizardState) -> None:
        self.storage[self._key] = serialize_snapshot(build_snapshot(state))

    def has_draft(self) -> bool:
        return self._key in self.storage

    def load(self) -> WizardState | None:
        raw = self.storage.pop(self._key, None)
        if raw is None:
            return None
        return deserialize_snapshot(raw)

    def clear(self) -> None:
        self.storage.pop(self._key, None)


def new_draft_token() -> str:
    return uuid4().hex


class FileDraftStore:
    """Draft slot in a JSON file named after a per-browser-session token.

    The token travels in the page query string, so a reload of the same tab
    finds the slot again while a fresh tab starts clean. Files older than
    ``ttl_seconds`` count as abandoned: they are never restored and are
    deleted whenever any slot in the directory is saved or read.
    """

    def __init__(
        self,
        directory: Path,
        token: str,
        *,
        key: str = DRAFT_KEY,
        ttl_seconds: int = DEFAULT_DRAFT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not _TOKEN_PATTERN.match(token or ""):
            raise ValueError("Invalid draft token")
        self._directory = Path(directory)
        self._key = key
        self._path = self._directory / f"{key}-{token}.json"
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def _is_expired(self, path: Path) -> bool:
        try:
            modified = path.stat().st_mtime
        except FileNotFoundError:
            return False
        return self._clock() - modified > self._ttl_seconds

    def prune_expired(self) -> int:
        """Delete abandoned draft files; returns how many were removed."""

        if not self._directory.is_dir():
            return 0
        removed = 0
        for candidate in self._directory.glob(f"{self._key}-*.json"):
            if self._is_expired(candidate):
                candidate.unlink(missing_ok=True)
                removed += 1
        if removed:
            logger.info("Pruned %s abandoned wizard draft(s)", removed)
        return removed

    def save(self, state: WizardState) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        self.prune_expired()
        text = serialize_snapshot(build_snapshot(state))
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=".draft-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def has_draft(self) -> bool:
        return self._path.is_file() and not self._is_expired(self._path)

    def load(self) -> WizardState | None:
        self.prune_expired()
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        self._path.unlink(missing_ok=True)
        return deserialize_snapshot(raw)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


__all__ = [
    "DEFAULT_DRAFT_TTL_SECONDS",
    "DraftStore",
    "FileDraftStore",
    "RAW_IMAGE_DRAFT_LIMIT",
    "SessionDraftStore",
    "build_snapshot",
    "deserialize_snapshot",
    "new_draft_token",
    "parse_snapshot",
    "serialize_snapshot",
]
