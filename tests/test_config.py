import pytest

from snfintel.config import DEFAULT_CONFIG, load_config, load_settings
from snfintel.config.settings import AlertThresholds, NarrativeSettings


def test_defaults_without_file():
    config = load_config(None)

    assert config["alerts"] == DEFAULT_CONFIG["alerts"]
    assert config["narrative"]["sample_fallbacks"] is False
    assert config is not DEFAULT_CONFIG


def test_user_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "alerts:\n  operating_margin: 3\nnarrative:\n  sample_fallbacks: true\n",
        encoding="utf-8",
    )

    config = load_config(str(path))

    assert config["alerts"]["operating_margin"] == 3
    assert config["alerts"]["contract_labor"] == 15
    assert config["narrative"]["focus_areas"] == ["margins", "labor", "revenue"]
    assert DEFAULT_CONFIG["alerts"]["operating_margin"] == 5


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_document(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_settings_from_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "alerts:\n  occupancy: 90\nbenchmarks:\n  skilled_mix: 22\n",
        encoding="utf-8",
    )

    settings = load_settings(str(path))

    assert settings.thresholds.occupancy == 90.0
    assert settings.thresholds.operating_margin == 5.0
    assert settings.benchmarks.skilled_mix == 22.0
    assert settings.sample_fallbacks is False


def test_unknown_threshold_rejected():
    with pytest.raises(ValueError):
        AlertThresholds.from_dict({"margin_floor": 4})


def test_default_settings_are_fresh():
    a = NarrativeSettings()
    b = NarrativeSettings()

    a.focus_areas.append("census")

    assert b.focus_areas == ["margins", "labor", "revenue"]
