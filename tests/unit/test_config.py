"""
Unit Tests - Configuration
"""
import logging

import pytest
from pydantic import ValidationError

from superstore.config import Settings, get_settings
from superstore.config.logging import configure_logging
from superstore.config.settings import MonitoringSettings, PipelineSettings


class TestPipelineSettings:
    """Tests for PipelineSettings"""

    def test_defaults(self):
        """Test default business thresholds"""
        settings = PipelineSettings()

        assert settings.outlier_sales_threshold == 10000.0
        assert settings.outlier_quantity_threshold == 100
        assert settings.high_value_threshold == 5000.0
        assert settings.medium_value_lower == 2000.0
        assert settings.medium_value_upper == 4999.0
        assert settings.duplicate_key == ["order_id", "product_id", "sales"]
        assert settings.remove_duplicates is False

    def test_env_override(self, monkeypatch):
        """Test thresholds read from the environment"""
        monkeypatch.setenv("PIPELINE_OUTLIER_SALES_THRESHOLD", "2500")
        monkeypatch.setenv("PIPELINE_REMOVE_DUPLICATES", "true")

        settings = PipelineSettings()

        assert settings.outlier_sales_threshold == 2500.0
        assert settings.remove_duplicates is True

    def test_inverted_medium_tier_rejected(self):
        """Test medium lower bound above upper bound"""
        with pytest.raises(ValidationError):
            PipelineSettings(medium_value_lower=3000.0, medium_value_upper=2000.0)

    def test_medium_above_high_rejected(self):
        """Test medium tier reaching past the high threshold"""
        with pytest.raises(ValidationError):
            PipelineSettings(medium_value_upper=6000.0, high_value_threshold=5000.0)


class TestSettings:
    """Tests for Settings"""

    def test_environment_validated(self):
        """Test unknown environments are rejected"""
        with pytest.raises(ValidationError):
            Settings(app_env="moon")

    def test_environment_normalized(self, test_settings):
        """Test environment value"""
        assert test_settings.app_env == "testing"
        assert not test_settings.is_production

    def test_log_format_validated(self):
        """Test unsupported log formats are rejected"""
        with pytest.raises(ValidationError):
            MonitoringSettings(LOG_FORMAT="xml")

    def test_cached(self):
        """Test settings are loaded once"""
        assert get_settings() is get_settings()


class TestLogging:
    """Tests for logging setup"""

    def test_configure_console(self):
        """Test console renderer setup"""
        configure_logging(log_level="DEBUG", log_format="console")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_configure_json(self):
        """Test JSON renderer setup with default level fallback"""
        configure_logging(log_level="verbose", log_format="json")

        assert logging.getLogger().level == logging.INFO
