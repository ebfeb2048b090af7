from pathlib import Path
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO

import streamlit as st

import pytest
from PIL import Image


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from integrations.memory import (  # noqa: E402
    InMemoryIdentityProvider,
    InMemoryObjectStore,
    InMemoryProfileStore,
)
from integrations.protocols import Session  # noqa: E402
from models.profile import FormFields  # noqa: E402
from wizard.crop import ImageUpload  # noqa: E402
from wizard.submission import SubmissionCoordinator  # noqa: E402

FIXED_NOW = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


@dataclass
class _SessionDict(dict[str, object]):
    """Lightweight replacement for ``st.session_state`` during tests."""

    def clear(self) -> None:  # type: ignore[override]
        super().clear()


@pytest.fixture(autouse=True)
def _stub_streamlit_session_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace Streamlit's runtime-bound session state with a plain dictionary."""

    session_state = _SessionDict()
    monkeypatch.setattr(st, "session_state", session_state, raising=False)
    yield


def make_image_bytes(size: tuple[int, int] = (800, 600), fmt: str = "PNG", color: str = "teal") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_upload() -> ImageUpload:
    return ImageUpload(filename="me.png", content_type="image/png", data=make_image_bytes())


@pytest.fixture
def session() -> Session:
    return Session(user_id="user-123", email="jane@example.com")


@pytest.fixture
def identity(session: Session) -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider(session)


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def coordinator(
    identity: InMemoryIdentityProvider,
    profile_store: InMemoryProfileStore,
    object_store: InMemoryObjectStore,
) -> SubmissionCoordinator:
    return SubmissionCoordinator(
        identity=identity,
        store=profile_store,
        objects=object_store,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def complete_fields() -> FormFields:
    """Fields that pass every required step."""

    return FormFields(
        name="Jane Doe",
        email="jane@example.com",
        cohort_semester="Fall",
        cohort_year="24",
        role="Analyst",
        company="Acme",
        spheres=["Finance"],
        location="New York, NY",
        graduation_year="2026",
        linkedin="jane-doe",
    )


@pytest.fixture
def image_bytes():
    """Factory for encoded test images."""

    return make_image_bytes


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
