"""Tests for settings defaults and the logging helpers."""
import logging

import pytest

from settings import Settings
from utils.logging_config import get_logger, set_log_level, setup_logging


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("SSA_WINDOW_SIZE", "SSA_SERIES_LENGTH", "SSA_TRAIN_SIZE", "SSA_RANK",
                     "SSA_ENERGY_THRESHOLD", "DEFAULT_FORECAST_HORIZON"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.SSA_WINDOW_SIZE == 7
        assert settings.SSA_SERIES_LENGTH == 30
        assert settings.SSA_TRAIN_SIZE == 365
        assert settings.SSA_RANK is None
        assert settings.DEFAULT_FORECAST_HORIZON == 14
        assert settings.training_kwargs()["energy_threshold"] == pytest.approx(0.9)

    def test_fixed_rank_disables_threshold(self, monkeypatch):
        monkeypatch.setenv("SSA_RANK", "4")
        monkeypatch.setenv("SSA_WINDOW_SIZE", "10")

        kwargs = Settings().training_kwargs()

        assert kwargs["rank"] == 4
        assert kwargs["window_size"] == 10
        assert kwargs["energy_threshold"] is None


class TestLogging:
    def test_module_loggers_share_namespace(self):
        assert get_logger("models.ssa_model").name == "ssa_forecaster.models.ssa_model"
        assert get_logger().name == "ssa_forecaster"

    def test_setup_does_not_stack_handlers(self):
        logger = setup_logging(log_level="INFO")
        count = len(logger.handlers)
        assert len(setup_logging(log_level="INFO").handlers) == count

    def test_set_log_level(self):
        try:
            set_log_level("WARNING")
            assert logging.getLogger("ssa_forecaster").level == logging.WARNING
            assert not get_logger("forecaster").isEnabledFor(logging.INFO)
        finally:
            set_log_level("INFO")

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            set_log_level("CHATTY")

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "ssa.log"
        try:
            setup_logging(log_level="INFO", log_file=str(log_file), enable_console=False)
            get_logger("tests").info("written to file")
            for handler in logging.getLogger("ssa_forecaster").handlers:
                handler.flush()
            assert "written to file" in log_file.read_text()
        finally:
            setup_logging(log_level="INFO")
