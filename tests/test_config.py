"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from whimcraft.config import ModelConfig, SearchLimits, WhimcraftConfig, load_config

ENV_VARS = [
    "WHIMCRAFT_DATA_DIR",
    "WHIMCRAFT_MAIN_MODEL",
    "WHIMCRAFT_IMAGE_MODEL",
    "WHIMCRAFT_USE_WEB_SEARCH",
    "GOOGLE_SEARCH_API_KEY",
    "GOOGLE_SEARCH_ENGINE_ID",
    "GROQ_API_KEY",
    "GROQ_MODEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path: Path, data) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return path


class TestDataclasses:
    """Tests for config dataclasses."""

    def test_defaults(self):
        config = WhimcraftConfig(data_dir=Path("/data"))
        assert config.memory_db_path == Path("/data/memory.db")
        assert config.usage_db_path == Path("/data/search_usage.db")
        assert config.log_dir == Path("/data/logs")
        assert config.search.daily_limit == 100
        assert config.models.main == "gemini-2.5-flash"
        assert config.use_web_search is False

    def test_default_data_dir(self):
        assert WhimcraftConfig().data_dir.name == ".whimcraft"

    def test_negative_limits_rejected(self):
        with pytest.raises(ValueError):
            SearchLimits(daily_limit=-1)
        with pytest.raises(ValueError):
            SearchLimits(cost_per_search=-0.5)


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "missing.json")
        assert config.models == ModelConfig()
        assert config.search == SearchLimits()

    def test_reads_file(self, tmp_path: Path):
        path = write_config(
            tmp_path,
            {
                "data_dir": str(tmp_path / "data"),
                "models": {"main": "m1", "image": "i1", "unknown": "x"},
                "search": {"daily_limit": 50, "free_daily_limit": 20, "cost_per_search": 1.0},
                "features": {"web_search": True},
            },
        )

        config = load_config(path)

        assert config.data_dir == tmp_path / "data"
        assert config.models.main == "m1"
        assert config.models.image == "i1"
        assert config.search == SearchLimits(50, 20, 1.0)
        assert config.use_web_search is True

    def test_invalid_json_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert load_config(path).search == SearchLimits()

    def test_non_object_uses_defaults(self, tmp_path: Path):
        assert load_config(write_config(tmp_path, [1, 2, 3])).models == ModelConfig()

    def test_invalid_limits_use_defaults(self, tmp_path: Path):
        path = write_config(tmp_path, {"search": {"daily_limit": -5}})
        assert load_config(path).search == SearchLimits()

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch):
        path = write_config(tmp_path, {"models": {"main": "from-file"}, "features": {"web_search": True}})
        monkeypatch.setenv("WHIMCRAFT_MAIN_MODEL", "from-env")
        monkeypatch.setenv("WHIMCRAFT_USE_WEB_SEARCH", "false")
        monkeypatch.setenv("WHIMCRAFT_DATA_DIR", str(tmp_path / "env-data"))
        monkeypatch.setenv("GOOGLE_SEARCH_API_KEY", "g-key")
        monkeypatch.setenv("GROQ_API_KEY", "groq-key")

        config = load_config(path)

        assert config.models.main == "from-env"
        assert config.use_web_search is False
        assert config.data_dir == tmp_path / "env-data"
        assert config.google_api_key == "g-key"
        assert config.groq_api_key == "groq-key"

    @pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("TRUE", True), ("0", False)])
    def test_env_flags(self, tmp_path: Path, monkeypatch, value: str, expected: bool):
        monkeypatch.setenv("WHIMCRAFT_USE_WEB_SEARCH", value)
        assert load_config(tmp_path / "none.json").use_web_search is expected

    def test_unknown_model_and_feature_keys_ignored(self, tmp_path: Path):
        """Only the main and image models and the web_search feature are configurable."""
        path = write_config(
            tmp_path,
            {
                "models": {"main": "m1", "lite": "l1"},
                "features": {"web_search": True, "intelligent_analysis": True},
            },
        )

        config = load_config(path)

        assert config.models == ModelConfig(main="m1")
        assert not hasattr(config.models, "lite")
        assert not hasattr(config, "use_intelligent_analysis")
