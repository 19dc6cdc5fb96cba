"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from recipe_nutrition.config import Settings


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FDC_API_KEY", "from-env")
    monkeypatch.setenv("LOOKUP_MAX_RETRIES", "5")
    monkeypatch.setenv("DEFAULT_SERVING_SIZE_GRAMS", "55")

    settings = Settings()

    assert settings.fdc_api_key == "from-env"
    assert settings.lookup_max_retries == 5
    assert settings.default_serving_size_grams == 55
    assert settings.fdc_base_url == "https://api.nal.usda.gov/fdc/v1"


def test_settings_reject_non_positive_serving() -> None:
    with pytest.raises(ValidationError):
        Settings(fdc_api_key="key", default_serving_size_grams=0)
