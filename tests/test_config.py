from types import SimpleNamespace

import pytest

import config


def test_secret_resolution_order(monkeypatch) -> None:
    fake_secrets: dict[str, object] = {"SUPABASE_URL": "https://secret.supabase.co"}
    monkeypatch.setattr(config, "st", SimpleNamespace(secrets=fake_secrets), raising=False)
    monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")

    # Direct Streamlit secret wins over environment variables.
    assert config.get_secret("SUPABASE_URL") == "https://secret.supabase.co"

    # Nested section is used when the top-level key is missing.
    fake_secrets.pop("SUPABASE_URL")
    fake_secrets["supabase"] = {"SUPABASE_URL": "https://section.supabase.co"}
    assert config.get_secret("SUPABASE_URL") == "https://section.supabase.co"

    # Environment variable is the final fallback.
    fake_secrets["supabase"].pop("SUPABASE_URL")  # type: ignore[attr-defined]
    assert config.get_secret("SUPABASE_URL") == "https://env.supabase.co"


def test_secret_aliases_are_tried_in_order(monkeypatch) -> None:
    monkeypatch.setattr(config, "st", SimpleNamespace(secrets={}), raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_ANON_KEY", "  anon-key  ")

    assert config.get_secret("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY") == "anon-key"


def test_missing_secret_is_empty(monkeypatch) -> None:
    monkeypatch.setattr(config, "st", SimpleNamespace(secrets={}), raising=False)
    monkeypatch.delenv("DIRECTORY_PASSWORD", raising=False)

    assert config.get_secret("DIRECTORY_PASSWORD", section="auth") == ""


def test_invalid_numbers_fall_back_with_warning() -> None:
    with pytest.warns(RuntimeWarning):
        assert config._parse_positive_int("big", env_var="CROP_OUTPUT_SIZE", default=400) == 400
    with pytest.warns(RuntimeWarning):
        assert config._parse_positive_int("-5", env_var="CROP_OUTPUT_SIZE", default=400) == 400
    with pytest.warns(RuntimeWarning):
        assert config._parse_positive_float("0", env_var="CROP_MAX_ZOOM", default=3.0) == 3.0

    assert config._parse_positive_int(" 256 ", env_var="CROP_OUTPUT_SIZE", default=400) == 256
    assert config._parse_positive_float(None, env_var="CROP_MIN_ZOOM", default=1.0) == 1.0


def test_defaults_match_crop_contract() -> None:
    assert config.PROFILES_TABLE == "profiles"
    assert config.PROFILE_PICTURE_BUCKET == "profile-pictures"
    assert 0 < config.CROP_JPEG_QUALITY <= 95
    assert config.CROP_MIN_ZOOM <= config.CROP_MAX_ZOOM
