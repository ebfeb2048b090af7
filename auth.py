from __future__ import annotations

import hmac
import logging

import streamlit as st

import config
from constants.keys import StateKeys, UIKeys
from core.errors import AuthError
from core.validators import is_valid_email
from integrations.protocols import IdentityProvider, Session
from state.draft import DraftStore
from utils.errors import display_error
from wizard.views import clear_widget_state

logger = logging.getLogger(__name__)

LOGIN_CODE_KEY = "ui.login.code"
LINK_SENT_KEY = "auth.link_sent_to"


def check_gate_password(candidate: str, expected: str) -> bool:
    """Compare the shared directory password in constant time."""

    if not candidate or not expected:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def has_access() -> bool:
    """Return whether this browser session passed the password gate."""

    if not config.DIRECTORY_PASSWORD:
        return True
    return bool(st.session_state.get(StateKeys.ACCESS_GRANTED))


def render_password_gate() -> bool:
    """Render the shared-password prompt until it is answered correctly."""

    if has_access():
        return True
    st.title("🔒 Members only")
    st.caption("Enter the directory password shared with the chapter.")
    with st.form("directory-gate"):
        password = st.text_input("Password", type="password", key=UIKeys.GATE_PASSWORD)
        submitted = st.form_submit_button("Enter")
    if submitted:
        if check_gate_password(password, config.DIRECTORY_PASSWORD):
            st.session_state[StateKeys.ACCESS_GRANTED] = True
            st.session_state.pop(UIKeys.GATE_PASSWORD, None)
            st.rerun()
        display_error("Incorrect password")
    return False


def _complete_sign_in(identity: IdentityProvider, email: str, code: str) -> Session | None:
    complete = getattr(identity, "complete_sign_in", None)
    if complete is None:
        return identity.get_current_session()
    return complete(email, code)


def render_login_form(identity: IdentityProvider) -> Session | None:
    """Return the active session, rendering the magic-link login when signed out."""

    try:
        session = identity.get_current_session()
    except AuthError as exc:
        logger.warning("Could not read the current session: %s", exc)
        session = None
    if session is not None:
        return session

    st.subheader("Sign in")
    st.caption("We'll email you a sign-in link and a one-time code.")
    email = st.text_input("Email", key=UIKeys.LOGIN_EMAIL).strip()
    if st.button("Send sign-in link", disabled=not email):
        if not is_valid_email(email):
            display_error("Enter a valid email")
        else:
            try:
                identity.sign_in_with_email_link(email, config.AUTH_REDIRECT_URL)
            except AuthError as exc:
                display_error(exc)
            else:
                st.session_state[LINK_SENT_KEY] = email
                st.success("Check your email for the sign-in link.")

    sent_to = st.session_state.get(LINK_SENT_KEY)
    if sent_to:
        code = st.text_input("One-time code", key=LOGIN_CODE_KEY).strip()
        if st.button("Verify code", disabled=not code):
            try:
                session = _complete_sign_in(identity, sent_to, code)
            except AuthError as exc:
                display_error(exc)
                return None
            if session is not None:
                st.session_state.pop(LINK_SENT_KEY, None)
                st.session_state.pop(LOGIN_CODE_KEY, None)
                st.rerun()
    return session


def logout_button(identity: IdentityProvider, draft_store: DraftStore | None = None) -> None:
    """Render the sign-out button; signing out drops the wizard and its draft."""

    if st.sidebar.button("Sign out"):
        try:
            identity.sign_out()
        except AuthError as exc:
            logger.warning("Sign-out failed: %s", exc)
        if draft_store is not None:
            draft_store.clear()
        for key in (StateKeys.WIZARD, LINK_SENT_KEY):
            st.session_state.pop(key, None)
        clear_widget_state()
        st.rerun()
