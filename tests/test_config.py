import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from genomegist.config import (  # noqa: E402
    CATEGORY_PRESETS,
    PRESET_REQUIRES_LICENSE,
    CategoryPreset,
    LicenseServiceConfig,
    SNPCategory,
    parse_categories,
)


def test_presets() -> None:
    assert SNPCategory.PHARMACOGENOMICS not in CATEGORY_PRESETS[CategoryPreset.WELLNESS]
    assert len(CATEGORY_PRESETS[CategoryPreset.FULL]) == len(SNPCategory)
    assert PRESET_REQUIRES_LICENSE == {
        CategoryPreset.DEMO: False,
        CategoryPreset.WELLNESS: True,
        CategoryPreset.FULL: True,
    }


def test_license_service_config_from_env() -> None:
    config = LicenseServiceConfig.from_env(
        {"GENOMEGIST_API_BASE_URL": "http://localhost:8787/api/", "GENOMEGIST_API_TIMEOUT": "2.5"}
    )

    assert config.base_url == "http://localhost:8787/api"
    assert config.timeout == 2.5
    assert LicenseServiceConfig.from_env({}).base_url == "https://api.genomegist.com/api"

    with pytest.raises(ValueError):
        LicenseServiceConfig.from_env({"GENOMEGIST_API_TIMEOUT": "soon"})
    with pytest.raises(ValueError):
        LicenseServiceConfig.from_env({"GENOMEGIST_API_TIMEOUT": "0"})


def test_key_shape_check() -> None:
    config = LicenseServiceConfig()

    assert config.is_well_formed_key("gg_abcdefg")
    assert not config.is_well_formed_key("gg_short")
    assert not config.is_well_formed_key("xx_abcdefghij")


def test_parse_categories() -> None:
    assert parse_categories(None) is None
    assert parse_categories("immune, Nutrition,immune") == (
        SNPCategory.IMMUNE,
        SNPCategory.NUTRITION,
    )
    assert parse_categories(["other"]) == (SNPCategory.OTHER,)

    with pytest.raises(ValueError, match="Unknown category"):
        parse_categories("astrology")
