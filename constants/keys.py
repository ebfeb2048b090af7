class UIKeys:
    """Keys for UI widgets in ``st.session_state``."""

    GATE_PASSWORD = "ui.gate.password"
    LOGIN_EMAIL = "ui.login.email"
    DIRECTORY_SEARCH = "ui.directory.search"
    DIRECTORY_SPHERES = "ui.directory.spheres"
    DIRECTORY_LOCATIONS = "ui.directory.locations"
    WIZARD_UPLOAD = "ui.wizard.upload"
    CROP_ZOOM = "ui.wizard.crop.zoom"
    CROP_OFFSET_X = "ui.wizard.crop.offset_x"
    CROP_OFFSET_Y = "ui.wizard.crop.offset_y"


class StateKeys:
    """Keys for data stored in ``st.session_state``."""

    ACCESS_GRANTED = "dsp_access_granted"
    WIZARD = "wizard.shell"
    WIZARD_NOTICE = "wizard.notice"
    DIRECTORY_CACHE = "directory.profiles"
    DRAFT_TOKEN = "draft"


# Fixed slot name of the single resumable wizard draft.
DRAFT_KEY = "joinFlowState"


class FieldNames:
    """Attribute names on :class:`models.profile.FormFields` bound to widgets."""

    NAME = "name"
    EMAIL = "email"
    COHORT_SEMESTER = "cohort_semester"
    COHORT_YEAR = "cohort_year"
    ROLE = "role"
    COMPANY = "company"
    IS_STUDENT = "is_student"
    SPHERES = "spheres"
    LOCATION = "location"
    GRADUATION_YEAR = "graduation_year"
    LINKEDIN = "linkedin"
    RAW_IMAGE = "raw_image"
    CROPPED_IMAGE = "cropped_image"
    MAJOR = "major"
    BIO = "bio"


__all__ = ["DRAFT_KEY", "FieldNames", "StateKeys", "UIKeys"]
