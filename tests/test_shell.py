import pytest
from PIL import Image

from constants.keys import FieldNames
from integrations.memory import InMemoryIdentityProvider, InMemoryProfileStore
from models.profile import FormFields
from state.draft import SessionDraftStore
from wizard.crop import ImageUpload
from wizard.shell import NOT_AT_REVIEW_MESSAGE, PICTURE_ERROR_KEY, SUBMIT_ERROR_KEY, WizardShell
from wizard.state import WizardMode, WizardState
from wizard.step_registry import step_keys
from wizard.submission import SubmissionCoordinator, SubmissionResult

EXISTING_PROFILE = {
    "user_id": "user-123",
    "name": "Jane Doe",
    "email": "jane@example.com",
    "pledgeClass": "Fall '24",
    "role": "Analyst",
    "company": "Acme",
    "sphere": ["Finance"],
    "location": "New York, NY",
    "graduationYear": 2026,
    "linkedinUrl": None,
}


class _RecordingSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def capture(self, event, properties=None) -> None:
        self.events.append((event, dict(properties or {})))


class _ExplodingSink:
    def capture(self, event, properties=None) -> None:
        raise RuntimeError("analytics down")


@pytest.fixture
def draft_store() -> SessionDraftStore:
    return SessionDraftStore({})


@pytest.fixture
def sink() -> _RecordingSink:
    return _RecordingSink()


@pytest.fixture
def completed() -> list[SubmissionResult]:
    return []


@pytest.fixture
def closed() -> list[bool]:
    return []


@pytest.fixture
def shell(coordinator, draft_store, sink, completed, closed) -> WizardShell:
    return WizardShell(
        coordinator=coordinator,
        draft_store=draft_store,
        analytics=sink,
        on_complete=completed.append,
        on_close=lambda: closed.append(True),
    )


def _walk_to_review(shell: WizardShell) -> None:
    while not shell.at_review:
        assert shell.next(), shell.state.errors


def _fill(shell: WizardShell, fields: FormFields) -> None:
    for name, value in fields.model_dump(exclude={"raw_image", "cropped_image", "is_student"}).items():
        shell.set_field(name, value)


def test_mount_starts_fresh_join(shell: WizardShell) -> None:
    state = shell.mount()

    assert state.step_index == 0
    assert shell.mounted
    assert shell.guard_active()
    assert shell.mount() is state


def test_edit_requires_profile(coordinator) -> None:
    with pytest.raises(ValueError):
        WizardShell(coordinator=coordinator, mode=WizardMode.EDIT)


def test_edit_mode_prefills_and_locks_email(coordinator, draft_store) -> None:
    shell = WizardShell(
        coordinator=coordinator,
        mode=WizardMode.EDIT,
        draft_store=draft_store,
        initial_profile=EXISTING_PROFILE,
    )
    state = shell.mount()

    assert state.step_index == 1
    assert state.fields.cohort_semester == "Fall"
    assert state.fields.cohort_year == "24"
    assert shell.set_field(FieldNames.EMAIL, "hijack@example.com") is False
    assert state.fields.email == "jane@example.com"


def test_refused_next_then_error_cleared_by_edit(shell: WizardShell) -> None:
    shell.mount()
    shell.next()

    assert shell.next() is False
    assert shell.state.errors == {"identity": "Name is required"}
    assert shell.live_error() == "Name is required"

    shell.set_field(FieldNames.NAME, "Jane")

    assert "identity" not in shell.state.errors
    assert shell.live_error() == "Enter a valid email"


def test_student_toggle_through_shell(shell: WizardShell) -> None:
    shell.mount()
    shell.set_field(FieldNames.ROLE, "Analyst")

    shell.set_student(True)
    assert shell.set_field(FieldNames.COMPANY, "Acme") is False
    assert shell.state.fields.company == "Duke University"

    shell.set_student(False)
    assert shell.state.fields.role == ""


def test_submit_outside_review_is_refused(shell: WizardShell, profile_store: InMemoryProfileStore) -> None:
    shell.mount()

    assert shell.submit() is None
    assert shell.state.errors[SUBMIT_ERROR_KEY] == NOT_AT_REVIEW_MESSAGE
    assert profile_store.calls == []


def test_successful_submit_tears_down(
    shell: WizardShell,
    complete_fields: FormFields,
    draft_store: SessionDraftStore,
    sink: _RecordingSink,
    completed: list[SubmissionResult],
) -> None:
    shell.mount()
    _fill(shell, complete_fields)
    _walk_to_review(shell)
    shell.hide()
    assert draft_store.has_draft()

    result = shell.submit()

    assert result is not None and result.created
    assert completed == [result]
    assert not shell.mounted
    assert not shell.guard_active()
    assert not draft_store.has_draft()
    assert sink.events == [("profile_submitted", {"mode": "join", "created": True})]


def test_failed_submit_keeps_form_and_rearms(
    shell: WizardShell,
    complete_fields: FormFields,
    profile_store: InMemoryProfileStore,
    sink: _RecordingSink,
    completed: list[SubmissionResult],
) -> None:
    profile_store.failures["select_by_owner"] = "JWT expired"
    shell.mount()
    _fill(shell, complete_fields)
    _walk_to_review(shell)

    assert shell.submit() is None
    assert shell.state.errors[SUBMIT_ERROR_KEY] == "JWT expired"
    assert shell.state.fields.name == "Jane Doe"
    assert shell.mounted
    assert not shell.submitting
    assert completed == []
    assert sink.events[-1][0] == "profile_submit_failed"

    profile_store.failures.clear()
    assert shell.submit() is not None


def test_submit_without_session_shows_login_message(
    draft_store, profile_store, object_store, complete_fields: FormFields
) -> None:
    coordinator = SubmissionCoordinator(
        identity=InMemoryIdentityProvider(None),
        store=profile_store,
        objects=object_store,
    )
    shell = WizardShell(coordinator=coordinator, draft_store=draft_store)
    shell.mount()
    _fill(shell, complete_fields)
    _walk_to_review(shell)

    shell.submit()

    assert shell.state.errors[SUBMIT_ERROR_KEY] == "No authenticated user found. Please try logging in again."
    assert profile_store.calls == []


def test_analytics_failure_does_not_break_submit(
    coordinator, draft_store, complete_fields: FormFields
) -> None:
    shell = WizardShell(coordinator=coordinator, draft_store=draft_store, analytics=_ExplodingSink())
    shell.mount()
    _fill(shell, complete_fields)
    _walk_to_review(shell)

    assert shell.submit() is not None


def test_hide_then_remount_restores_once(coordinator, draft_store) -> None:
    first = WizardShell(coordinator=coordinator, draft_store=draft_store)
    first.mount()
    first.set_field(FieldNames.NAME, "Jane")
    first.state.step_index = 4
    first.hide()

    second = WizardShell(coordinator=coordinator, draft_store=draft_store)
    restored = second.mount()

    assert second.restored_from_draft
    assert restored.step_index == 4
    assert restored.fields.name == "Jane"

    third = WizardShell(coordinator=coordinator, draft_store=draft_store)
    assert third.mount().step_index == 0


def test_restored_index_is_clamped(coordinator, draft_store) -> None:
    draft_store.save(WizardState(step_index=99))
    shell = WizardShell(coordinator=coordinator, draft_store=draft_store)

    assert shell.mount().step_index == len(step_keys()) - 1


def test_draft_from_another_owner_is_discarded(coordinator, draft_store) -> None:
    alice = WizardShell(coordinator=coordinator, draft_store=draft_store, owner_id="alice")
    alice.mount()
    alice.set_field(FieldNames.NAME, "Alice Smith")
    alice.set_field(FieldNames.EMAIL, "alice@example.com")
    alice.state.step_index = 5
    alice.hide()

    bob = WizardShell(coordinator=coordinator, draft_store=draft_store, owner_id="bob")
    state = bob.mount()

    assert not bob.restored_from_draft
    assert state.step_index == 0
    assert state.fields.name == ""
    assert state.fields.email == ""
    assert state.owner_id == "bob"
    assert not draft_store.has_draft()


def test_draft_restored_for_same_owner(coordinator, draft_store) -> None:
    first = WizardShell(coordinator=coordinator, draft_store=draft_store, owner_id="alice")
    first.mount()
    first.set_field(FieldNames.NAME, "Alice Smith")
    first.hide()

    second = WizardShell(coordinator=coordinator, draft_store=draft_store, owner_id="alice")

    assert second.mount().fields.name == "Alice Smith"
    assert second.restored_from_draft


def test_close_discards_without_saving(shell: WizardShell, draft_store, closed) -> None:
    shell.mount()
    shell.set_field(FieldNames.NAME, "Jane")
    shell.hide()

    shell.close()

    assert closed == [True]
    assert not shell.mounted
    assert not shell.guard_active()
    assert not draft_store.has_draft()
    shell.hide()
    assert not draft_store.has_draft()


def test_media_errors_recorded_on_picture_step(shell: WizardShell) -> None:
    shell.mount()
    upload = ImageUpload(filename="IMG_1.heic", content_type="image/heic", data=b"heic")

    assert shell.select_image(upload) is False
    assert shell.state.errors[PICTURE_ERROR_KEY] == "HEIC images are not supported. Please use JPG or PNG."
    assert shell.state.fields.raw_image is None


def test_oversized_image_recorded_not_raised(monkeypatch, shell: WizardShell, png_upload: ImageUpload) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    shell.mount()

    assert shell.select_image(png_upload) is False
    assert shell.state.errors[PICTURE_ERROR_KEY] == "Image is too large. Please choose a smaller picture."
    assert shell.mounted


def test_picture_crop_flow(shell: WizardShell, png_upload: ImageUpload) -> None:
    shell.mount()

    assert shell.select_image(png_upload)
    shell.update_crop(zoom=1.5)
    assert shell.save_crop()
    saved = shell.state.fields.cropped_image
    assert saved and saved.startswith("data:image/jpeg;base64,")

    assert shell.edit_crop()
    shell.cancel_crop()
    assert shell.state.fields.cropped_image == saved
