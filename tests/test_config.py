import json
import logging

import pytest

from openingplacer.config import DEFAULT_SETTINGS_PATH, EngineSettings, load_settings
from openingplacer.logging_config import setup_logging
from openingplacer.model.elements import BarrierClass, ElementKind


def test_defaults():
    settings = EngineSettings()
    assert settings.opening_family_name == "Отверстие"
    assert settings.width_parameter == "Ширина"
    assert settings.height_parameter == "Высота"
    assert settings.source_model_token == "ОВ"
    assert settings.element_kinds == [ElementKind.DUCT, ElementKind.PIPE]
    assert settings.barrier_class == BarrierClass.WALL
    assert settings.clearance == 0.0


def test_bundled_defaults_match_built_in():
    assert load_settings() == EngineSettings()
    assert load_settings(DEFAULT_SETTINGS_PATH) == EngineSettings()


def test_from_dict_coerces_values():
    settings = EngineSettings.from_dict({"element_kinds": ["Pipe"], "clearance": "10", "log_level": "debug"})
    assert settings.element_kinds == [ElementKind.PIPE]
    assert settings.clearance == 10.0
    assert settings.log_level == "DEBUG"


def test_unknown_keys_ignored(caplog):
    with caplog.at_level(logging.WARNING, logger="openingplacer"):
        settings = EngineSettings.from_dict({"max_workers": 3, "colour": "red"})
    assert settings.max_workers == 3
    assert "colour" in caplog.text


def test_round_trip():
    settings = EngineSettings(clearance=5.0, max_workers=2, element_kinds=[ElementKind.PIPE, ElementKind.DUCT])
    assert EngineSettings.from_dict(json.loads(json.dumps(settings.to_dict()))) == settings


@pytest.mark.parametrize("overrides", [
    {"element_kinds": []},
    {"element_kinds": ["Duct", "Duct"]},
    {"element_kinds": ["Cable"]},
    {"clearance": -1},
    {"max_workers": 0},
    {"log_level": "LOUD"},
    {"opening_family_name": ""},
    {"barrier_class": "Floor"},
])
def test_invalid_settings(overrides):
    with pytest.raises(ValueError):
        EngineSettings.from_dict(overrides)


def test_load_settings_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"clearance": 25, "opening_family_name": "Hole"}), encoding="utf-8")
    settings = load_settings(str(path))
    assert settings.clearance == 25.0
    assert settings.opening_family_name == "Hole"
    assert settings.width_parameter == "Ширина"


def test_load_settings_missing_explicit_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "missing.json"))


def test_load_settings_not_an_object(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(str(path))


def test_setup_logging_levels(tmp_path):
    log_file = tmp_path / "run.log"
    logger = logging.getLogger("openingplacer")
    try:
        setup_logging("debug", log_file=str(log_file))
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert "Logging initialized." in log_file.read_text(encoding="utf-8")

        setup_logging(logging.WARNING)
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

        with pytest.raises(ValueError):
            setup_logging("LOUD")
    finally:
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
