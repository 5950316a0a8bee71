"""Tests for settings, logger setup and lenient validation."""

import sys

from loguru import logger

from plan_engine.config import EngineSettings
from plan_engine.core import setup_logger
from plan_engine.core.validation import validate_lenient
from plan_engine.plans.types import PlanMeta


def test_settings_defaults():
    config = EngineSettings()

    assert config.interval_pace_variation_threshold == 0.15
    assert config.tempo_relative_pace_threshold == 0.90
    assert config.auto_match_threshold == 0.75
    assert config.suggest_match_threshold == 0.50
    assert config.match_window_days == 7
    assert config.missed_grace_days == 3


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("PLAN_ENGINE_AUTO_MATCH_THRESHOLD", "0.8")
    monkeypatch.setenv("PLAN_ENGINE_LOG_LEVEL", "debug")

    config = EngineSettings()

    assert config.auto_match_threshold == 0.8
    assert config.log_level == "DEBUG"


def test_invalid_log_level_falls_back_to_info():
    assert EngineSettings(log_level="LOUD").log_level == "INFO"


def test_validate_lenient_drops_only_bad_fields(log_messages):
    meta = validate_lenient(PlanMeta, {"plan_name": "Base", "start_date": "soon"}, "plan meta")

    assert meta.plan_name == "Base"
    assert meta.start_date is None
    assert any("Dropping invalid field(s) on plan meta: start_date" in message for message in log_messages)


def test_setup_logger_writes_file_with_context(tmp_path):
    log_file = tmp_path / "logs" / "engine.log"

    setup_logger(EngineSettings(log_file=str(log_file)), level="debug")
    logger.info("Analyzed plan compliance", weeks=2, overall_rate=67)
    logger.remove()
    logger.add(sys.stderr)

    written = log_file.read_text(encoding="utf-8")
    assert "Analyzed plan compliance weeks=2 overall_rate=67" in written
    assert "Plan engine logging configured level=DEBUG" in written
