"""Directory listing with search and filters."""

from __future__ import annotations

import html
from typing import Any, Iterable, Mapping, Sequence

import streamlit as st

from constants.directory import SPHERE_OPTIONS
from constants.keys import UIKeys
from core.validators import deduplicate_preserve_order
from integrations.analytics import capture_safely
from integrations.protocols import AnalyticsSink, ProfileRow

_SEARCH_COLUMNS = ("name", "company", "role", "location", "major", "pledgeClass")
_LAST_SEARCH_KEY = "directory.last_search"


def _matches_query(profile: Mapping[str, Any], query: str) -> bool:
    needle = query.strip().casefold()
    if not needle:
        return True
    for column in _SEARCH_COLUMNS:
        value = profile.get(column)
        if isinstance(value, str) and needle in value.casefold():
            return True
    return False


def filter_profiles(
    profiles: Iterable[Mapping[str, Any]],
    query: str = "",
    spheres: Sequence[str] = (),
    locations: Sequence[str] = (),
) -> list[Mapping[str, Any]]:
    """Return profiles matching the free-text ``query`` and any-of filters.

    ``query`` is a case-insensitive substring match over the text columns.
    A profile passes the sphere filter when it shares at least one sphere,
    and the location filter when its location is one of ``locations``.
    """

    wanted_spheres = set(spheres)
    wanted_locations = set(locations)
    result: list[Mapping[str, Any]] = []
    for profile in profiles:
        if not _matches_query(profile, query):
            continue
        if wanted_spheres and not wanted_spheres.intersection(profile.get("sphere") or []):
            continue
        if wanted_locations and profile.get("location") not in wanted_locations:
            continue
        result.append(profile)
    return result


def location_options(profiles: Iterable[Mapping[str, Any]]) -> list[str]:
    """Return distinct locations present in ``profiles``, sorted."""

    values = [str(p.get("location")).strip() for p in profiles if p.get("location")]
    return sorted(deduplicate_preserve_order(values), key=str.casefold)


def _profile_subtitle(profile: Mapping[str, Any]) -> str:
    parts = [profile.get("role"), profile.get("company")]
    headline = " @ ".join(str(part) for part in parts if part)
    cohort = profile.get("pledgeClass")
    return " · ".join(part for part in (headline, cohort) if part)


def render_profile_card(profile: Mapping[str, Any], *, analytics: AnalyticsSink | None = None) -> None:
    """Render one directory entry."""

    with st.container(border=True):
        picture_col, body_col = st.columns([1, 4])
        with picture_col:
            picture = profile.get("profile_picture_url")
            if picture:
                st.image(picture, width=96)
            else:
                initials = "".join(word[:1] for word in str(profile.get("name") or "?").split()[:2]).upper()
                st.markdown(f"### {html.escape(initials)}")
        with body_col:
            st.markdown(f"**{profile.get('name') or 'Unnamed member'}**")
            subtitle = _profile_subtitle(profile)
            if subtitle:
                st.caption(subtitle)
            details = [
                ", ".join(profile.get("sphere") or []),
                profile.get("location") or "",
                f"Class of {profile['graduationYear']}" if profile.get("graduationYear") else "",
                profile.get("major") or "",
            ]
            st.write(" · ".join(detail for detail in details if detail))
            if profile.get("bio"):
                st.write(profile["bio"])
            linkedin = profile.get("linkedinUrl")
            if linkedin:
                if st.button("LinkedIn", key=f"linkedin.{profile.get('user_id') or profile.get('name')}"):
                    capture_safely(analytics, "clicked_linkedin", {"profile": profile.get("user_id")})
                    st.markdown(f"[Open LinkedIn profile]({linkedin})")


def render_directory(
    profiles: Sequence[ProfileRow],
    *,
    analytics: AnalyticsSink | None = None,
) -> list[Mapping[str, Any]]:
    """Render filters and cards; return the visible profiles."""

    search_col, sphere_col, location_col = st.columns([3, 2, 2])
    with search_col:
        query = st.text_input("Search", key=UIKeys.DIRECTORY_SEARCH, placeholder="Name, company, role…")
    with sphere_col:
        spheres = st.multiselect("Spheres", list(SPHERE_OPTIONS), key=UIKeys.DIRECTORY_SPHERES)
    with location_col:
        locations = st.multiselect("Locations", location_options(profiles), key=UIKeys.DIRECTORY_LOCATIONS)

    if query.strip() and query.strip() != st.session_state.get(_LAST_SEARCH_KEY):
        st.session_state[_LAST_SEARCH_KEY] = query.strip()
        capture_safely(analytics, "used_search", {"query_length": len(query.strip())})

    visible = filter_profiles(profiles, query, spheres, locations)
    st.caption(f"{len(visible)} of {len(profiles)} members")
    for profile in visible:
        render_profile_card(profile, analytics=analytics)
    if not visible:
        st.info("No members match these filters.")
    return visible


__all__ = ["filter_profiles", "location_options", "render_directory", "render_profile_card"]
