"""Tests for configuration loading and validation."""

import tempfile
from pathlib import Path

import pydantic
import pytest
import yaml

from quiz_rating.core.config import (
    DB_URL_ENV_VAR,
    DEFAULT_DB_URL,
    EngineConfig,
    RatingConfig,
    RewardConfig,
    StorageConfig,
    load_config,
)
from quiz_rating.core.errors import ConfigurationError


def _write_yaml(data) -> Path:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        return Path(f.name)


class TestRatingConfig:
    """Tests for RatingConfig."""

    def test_defaults(self):
        """Test the default rating constants."""
        config = RatingConfig()
        assert config.initial_rating == 1200
        assert (config.win_threshold, config.draw_threshold) == (70, 50)
        assert (config.max_gain, config.max_loss) == (60, 30)
        assert config.gold_threshold == 4160
        assert config.max_rank_modifier == 3.5
        assert config.accuracy_tolerance == 2.5

    def test_draw_above_win_fails(self):
        """Test thresholds must be ordered."""
        with pytest.raises(pydantic.ValidationError, match="draw_threshold"):
            RatingConfig(win_threshold=50, draw_threshold=60)

    def test_threshold_range(self):
        """Test thresholds stay inside the score range."""
        with pytest.raises(pydantic.ValidationError):
            RatingConfig(win_threshold=120)

    def test_rank_step_positive(self):
        """Test the rank step cannot be zero."""
        with pytest.raises(pydantic.ValidationError):
            RatingConfig(rank_step=0)


class TestRewardConfig:
    """Tests for RewardConfig."""

    def test_defaults(self):
        """Test the default bonus amounts."""
        config = RewardConfig()
        assert config.perfect_bonus == 50
        assert config.excellent_bonus == 25
        assert (config.volume_bonus_high, config.volume_bonus_low) == (20, 10)
        assert config.hard_bonus == 15

    def test_negative_bonus_fails(self):
        """Test bonuses cannot be negative."""
        with pytest.raises(pydantic.ValidationError):
            RewardConfig(hard_bonus=-1)


class TestStorageConfig:
    """Tests for StorageConfig."""

    def test_explicit_url(self, monkeypatch):
        """Test a configured URL wins over the environment."""
        monkeypatch.setenv(DB_URL_ENV_VAR, "sqlite:///env.db")
        assert StorageConfig(db_url="sqlite:///cfg.db").get_db_url() == "sqlite:///cfg.db"

    def test_env_url(self, monkeypatch):
        """Test the environment is used when nothing is configured."""
        monkeypatch.setenv(DB_URL_ENV_VAR, "sqlite:///env.db")
        assert StorageConfig().get_db_url() == "sqlite:///env.db"

    def test_default_url(self, monkeypatch):
        """Test the DuckDB file is the fallback."""
        monkeypatch.delenv(DB_URL_ENV_VAR, raising=False)
        assert StorageConfig().get_db_url() == DEFAULT_DB_URL


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self):
        """Test loading a valid config file."""
        path = _write_yaml(
            {
                "rating": {"initial_rating": 1500, "max_gain": 40},
                "rewards": {"hard_bonus": 30},
                "storage": {"db_url": "sqlite:///ratings.db"},
            }
        )
        try:
            config = load_config(path)
            assert config.rating.initial_rating == 1500
            assert config.rating.max_gain == 40
            assert config.rating.max_loss == 30
            assert config.rewards.hard_bonus == 30
            assert config.storage.db_url == "sqlite:///ratings.db"
        finally:
            path.unlink()

    def test_empty_file_gives_defaults(self):
        """Test an empty file loads the default config."""
        path = _write_yaml(None)
        path.write_text("")
        try:
            assert load_config(path) == EngineConfig()
        finally:
            path.unlink()

    def test_non_mapping_fails(self):
        """Test a YAML list is rejected."""
        path = _write_yaml(["rating", "rewards"])
        try:
            with pytest.raises(ConfigurationError, match="Expected a mapping"):
                load_config(path)
        finally:
            path.unlink()

    def test_invalid_values_fail(self):
        """Test invalid values surface pydantic errors."""
        path = _write_yaml({"rating": {"win_threshold": 40, "draw_threshold": 60}})
        try:
            with pytest.raises(pydantic.ValidationError):
                load_config(path)
        finally:
            path.unlink()

    def test_load_missing_file(self):
        """Test loading non-existent file raises error."""
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/config.yaml")
