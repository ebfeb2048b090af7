import pytest

from models.profile import FormFields
from wizard.validation import validate_all, validate_step


@pytest.mark.parametrize(
    ("step", "fields", "message"),
    [
        ("identity", FormFields(email="jane@example.com"), "Name is required"),
        ("identity", FormFields(name="Jane", email="jane@example"), "Enter a valid email"),
        ("identity", FormFields(name="Jane", email="jane doe@example.com"), "Enter a valid email"),
        ("cohort", FormFields(cohort_year="24"), "Cohort semester is required"),
        ("cohort", FormFields(cohort_semester="Winter", cohort_year="24"), "Cohort semester is required"),
        ("cohort", FormFields(cohort_semester="Fall", cohort_year="2024"), "Enter the two-digit cohort year, e.g. 24"),
        ("professional", FormFields(role="Analyst"), "Role and company required, or select student"),
        ("sphere", FormFields(), "Select at least one sphere"),
        ("location", FormFields(location="   "), "Location required"),
        ("graduation_year", FormFields(graduation_year="24"), "Enter a valid year"),
        ("linkedin", FormFields(linkedin="jane doe"), "Enter just your LinkedIn handle"),
    ],
)
def test_invalid_steps_report_reason(step: str, fields: FormFields, message: str) -> None:
    result = validate_step(step, fields)

    assert not result.valid
    assert result.message == message


def test_student_passes_professional_without_role() -> None:
    fields = FormFields(is_student=True)

    assert validate_step("professional", fields).valid


def test_optional_and_unknown_steps_always_pass() -> None:
    empty = FormFields()

    for step in ("welcome", "profile_picture", "major", "bio", "review", "linkedin", "nope"):
        assert validate_step(step, empty).valid


def test_validate_all_lists_failing_required_steps(complete_fields: FormFields) -> None:
    assert validate_all(complete_fields) == {}

    complete_fields.spheres = []
    complete_fields.graduation_year = ""

    assert validate_all(complete_fields) == {
        "sphere": "Select at least one sphere",
        "graduation_year": "Enter a valid year",
    }
