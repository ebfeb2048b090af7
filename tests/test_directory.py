from components.directory import filter_profiles, location_options
import components.stepper as stepper_module
from components.stepper import build_summary_segments, render_progress, step_status
from components.unload_guard import unload_guard_script

PROFILES = [
    {"user_id": "a", "name": "Jane Doe", "company": "Acme", "role": "Analyst", "sphere": ["Finance"], "location": "New York, NY"},
    {"user_id": "b", "name": "Sam Lee", "company": "Globex", "role": "Engineer", "sphere": ["Tech"], "location": "Seattle, WA"},
    {"user_id": "c", "name": "Ana Ruiz", "company": "Duke University", "role": "Student", "sphere": ["Tech", "Consulting"], "location": "Durham, NC", "major": "Economics"},
]


def _ids(rows) -> list[str]:
    return [row["user_id"] for row in rows]


def test_empty_filters_return_everything() -> None:
    assert _ids(filter_profiles(PROFILES)) == ["a", "b", "c"]


def test_query_is_case_insensitive_substring() -> None:
    assert _ids(filter_profiles(PROFILES, "acme")) == ["a"]
    assert _ids(filter_profiles(PROFILES, "ECON")) == ["c"]


def test_sphere_filter_is_any_of() -> None:
    assert _ids(filter_profiles(PROFILES, spheres=["Tech"])) == ["b", "c"]
    assert _ids(filter_profiles(PROFILES, spheres=["Finance", "Consulting"])) == ["a", "c"]


def test_filters_combine() -> None:
    assert _ids(filter_profiles(PROFILES, "student", ["Tech"], ["Durham, NC"])) == ["c"]
    assert filter_profiles(PROFILES, "student", ["Finance"]) == []


def test_location_options_are_distinct_and_sorted() -> None:
    assert location_options(PROFILES + [{"location": "seattle, wa"}]) == ["Durham, NC", "New York, NY", "Seattle, WA"]


def test_stepper_marks_progress() -> None:
    assert [step_status(i, 1) for i in range(3)] == ["done", "current", "upcoming"]
    segments = build_summary_segments(0, ["Name & email"])
    assert segments == ["<span data-state='current'>➤ Name &amp; email</span>"]


def test_stepper_styles_emitted_on_every_run(monkeypatch) -> None:
    emitted: list[str] = []
    monkeypatch.setattr(stepper_module.st, "markdown", lambda body, **kwargs: emitted.append(body))
    monkeypatch.setattr(stepper_module.st, "progress", lambda *args, **kwargs: None)

    render_progress(0, ["Welcome", "Name & email"], progress=0.0)
    render_progress(1, ["Welcome", "Name & email"], progress=0.5)

    assert sum("<style>" in body for body in emitted) == 2


def test_unload_guard_installs_only_while_active() -> None:
    assert "if (true)" in unload_guard_script(True)
    assert "if (false)" in unload_guard_script(False)
    assert "removeEventListener('beforeunload'" in unload_guard_script(False)
