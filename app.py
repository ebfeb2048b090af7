# app.py: alumni directory entrypoint
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
import sys
from typing import Any, Final, Sequence

import streamlit as st

APP_ROOT = Path(__file__).resolve().parent
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

import config  # noqa: E402
from auth import logout_button, render_login_form, render_password_gate  # noqa: E402
from components.directory import render_directory  # noqa: E402
from constants.keys import StateKeys  # noqa: E402
from core.errors import StoreError  # noqa: E402
from infra.logging import configure_logging  # noqa: E402
from integrations.analytics import default_analytics_sink  # noqa: E402
from integrations.memory import InMemoryIdentityProvider, InMemoryObjectStore, InMemoryProfileStore  # noqa: E402
from integrations.protocols import AnalyticsSink, IdentityProvider, ObjectStore, ProfileRow, ProfileStore, Session  # noqa: E402
from state.draft import DraftStore, FileDraftStore, SessionDraftStore, new_draft_token  # noqa: E402
from utils.errors import display_error  # noqa: E402
from utils.telemetry import setup_tracing  # noqa: E402
from wizard.crop import CropPipeline  # noqa: E402
from wizard.shell import WizardShell  # noqa: E402
from wizard.state import WizardMode  # noqa: E402
from wizard.submission import SubmissionCoordinator, SubmissionResult  # noqa: E402
from wizard.views import clear_widget_state, run_wizard  # noqa: E402

logger = logging.getLogger(__name__)

BACKENDS_STATE_KEY: Final[str] = "directory.backends"

configure_logging()
setup_tracing()

st.set_page_config(page_title=config.APP_TITLE, page_icon="🎓", layout="centered")


@dataclass(frozen=True)
class Backends:
    identity: IdentityProvider
    store: ProfileStore
    objects: ObjectStore
    analytics: AnalyticsSink


@st.cache_resource
def _shared_memory_backends() -> tuple[InMemoryProfileStore, InMemoryObjectStore]:
    """Process-wide in-memory store used when Supabase is not configured."""

    return InMemoryProfileStore(), InMemoryObjectStore()


def get_backends() -> Backends:
    """Return this browser session's collaborators, creating them on first use."""

    backends = st.session_state.get(BACKENDS_STATE_KEY)
    if isinstance(backends, Backends):
        return backends
    if config.SUPABASE_ENABLED:
        from integrations.supabase_backend import (
            SupabaseIdentityProvider,
            SupabaseObjectStore,
            SupabaseProfileStore,
            create_session_client,
        )

        client = create_session_client(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
        backends = Backends(
            identity=SupabaseIdentityProvider(client),
            store=SupabaseProfileStore(client, config.PROFILES_TABLE),
            objects=SupabaseObjectStore(client, config.PROFILE_PICTURE_BUCKET),
            analytics=default_analytics_sink(),
        )
    else:
        store, objects = _shared_memory_backends()
        backends = Backends(
            identity=InMemoryIdentityProvider(),
            store=store,
            objects=objects,
            analytics=default_analytics_sink(),
        )
    st.session_state[BACKENDS_STATE_KEY] = backends
    return backends


def get_draft_store() -> DraftStore:
    """Return the draft slot for this tab.

    File drafts are keyed by a token kept in the page URL so that reloading
    the tab finds the unfinished entry again.
    """

    if not config.DRAFT_FILE_STORE_ENABLED:
        return SessionDraftStore()
    token = st.query_params.get(StateKeys.DRAFT_TOKEN)
    if token:
        try:
            return FileDraftStore(config.DRAFT_DIR, token, ttl_seconds=config.DRAFT_TTL_SECONDS)
        except ValueError:
            logger.info("Ignoring malformed draft token in URL")
    token = new_draft_token()
    st.query_params[StateKeys.DRAFT_TOKEN] = token
    return FileDraftStore(config.DRAFT_DIR, token, ttl_seconds=config.DRAFT_TTL_SECONDS)


def load_profiles(store: ProfileStore) -> Sequence[ProfileRow]:
    cached = st.session_state.get(StateKeys.DIRECTORY_CACHE)
    if cached is not None:
        return cached
    try:
        profiles = list(store.select_all())
    except StoreError as exc:
        display_error(exc)
        return []
    st.session_state[StateKeys.DIRECTORY_CACHE] = profiles
    return profiles


def _close_wizard() -> None:
    st.session_state.pop(StateKeys.WIZARD, None)
    clear_widget_state()


def _on_wizard_complete(result: SubmissionResult) -> None:
    _close_wizard()
    st.session_state.pop(StateKeys.DIRECTORY_CACHE, None)
    st.session_state[StateKeys.WIZARD_NOTICE] = (
        "Welcome to the directory!" if result.created else "Your profile was updated."
    )


def open_wizard(
    backends: Backends,
    session: Session,
    own_profile: ProfileRow | None,
    draft_store: DraftStore,
) -> WizardShell:
    mode = WizardMode.EDIT if own_profile else WizardMode.JOIN
    shell = WizardShell(
        mode=mode,
        coordinator=SubmissionCoordinator(
            identity=backends.identity,
            store=backends.store,
            objects=backends.objects,
        ),
        crop_pipeline=CropPipeline(
            output_size=config.CROP_OUTPUT_SIZE,
            quality=config.CROP_JPEG_QUALITY,
            min_zoom=config.CROP_MIN_ZOOM,
            max_zoom=config.CROP_MAX_ZOOM,
        ),
        draft_store=draft_store,
        initial_profile=own_profile,
        owner_id=session.user_id,
        analytics=backends.analytics,
        on_complete=_on_wizard_complete,
        on_close=_close_wizard,
    )
    st.session_state[StateKeys.WIZARD] = shell
    return shell


def _own_profile(store: ProfileStore, session: Session) -> ProfileRow | None:
    try:
        return store.select_by_owner(session.user_id)
    except StoreError as exc:
        logger.warning("Could not load own profile: %s", exc)
        return None


def _prefill_email(shell: WizardShell, session: Session) -> None:
    if shell.mode is WizardMode.JOIN and session.email and not shell.state.fields.email:
        shell.set_field("email", session.email)


def main() -> None:
    if not render_password_gate():
        return
    backends = get_backends()
    session = render_login_form(backends.identity)
    if session is None:
        return
    draft_store = get_draft_store()
    logout_button(backends.identity, draft_store)

    shell: Any = st.session_state.get(StateKeys.WIZARD)
    if shell is None and draft_store.has_draft():
        shell = open_wizard(backends, session, _own_profile(backends.store, session), draft_store)

    if isinstance(shell, WizardShell):
        if not shell.mounted:
            shell.mount()
            _prefill_email(shell, session)
        run_wizard(shell)
        if shell.mounted:
            return
        st.rerun()

    st.title(config.APP_TITLE)
    notice = st.session_state.pop(StateKeys.WIZARD_NOTICE, None)
    if notice:
        st.success(notice)

    own_profile = _own_profile(backends.store, session)
    label = "Edit my profile" if own_profile else "Join the directory"
    if st.button(label, type="primary"):
        open_wizard(backends, session, own_profile, draft_store)
        st.rerun()

    render_directory(load_profiles(backends.store), analytics=backends.analytics)


main()
