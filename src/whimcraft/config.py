"""Configuration loader.

Loads settings from ~/.whimcraft/config.json and overlays environment
variables, so a deployment can run from either source.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_HOME = Path.home() / ".whimcraft"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.json"


@dataclass
class ModelConfig:
    """Model identifiers handed to the LLM provider.

    Attributes:
        main: Model for user-facing conversation.
        image: Model for image generation.
    """

    main: str = "gemini-2.5-flash"
    image: str = "gemini-2.5-flash-image"


@dataclass
class SearchLimits:
    """Global web search quota.

    Attributes:
        daily_limit: Searches allowed per rolling 24 hours, all users combined.
        free_daily_limit: Searches per 24 hours that cost nothing.
        cost_per_search: Cost in cents of each search beyond the free tier.
    """

    daily_limit: int = 100
    free_daily_limit: int = 100
    cost_per_search: float = 0.5

    def __post_init__(self) -> None:
        if self.daily_limit < 0 or self.free_daily_limit < 0:
            raise ValueError("search limits cannot be negative")
        if self.cost_per_search < 0:
            raise ValueError("cost_per_search cannot be negative")


@dataclass
class WhimcraftConfig:
    """Top-level configuration.

    Attributes:
        data_dir: Directory holding the SQLite databases and logs.
        models: Model identifiers.
        search: Web search quota settings.
        use_web_search: Whether the orchestrator may run web searches.
        google_api_key: Google Custom Search API key.
        google_engine_id: Google Programmable Search Engine id.
        groq_api_key: API key for the fact extraction model.
        extraction_model: Model used for fact extraction.
    """

    data_dir: Path | None = None
    models: ModelConfig = field(default_factory=ModelConfig)
    search: SearchLimits = field(default_factory=SearchLimits)
    use_web_search: bool = False
    google_api_key: str = ""
    google_engine_id: str = ""
    groq_api_key: str = ""
    extraction_model: str = "llama-3.1-70b-versatile"

    def __post_init__(self) -> None:
        if self.data_dir is None:
            self.data_dir = DEFAULT_HOME

    @property
    def memory_db_path(self) -> Path:
        return self.data_dir / "memory.db"

    @property
    def usage_db_path(self) -> Path:
        return self.data_dir / "search_usage.db"

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(config_path: Path | None = None) -> WhimcraftConfig:
    """Load WhimcraftConfig from a JSON file and the environment.

    The config file should have this structure:
    ```json
    {
      "data_dir": "~/.whimcraft",
      "models": {"main": "gemini-2.5-flash", "image": "gemini-2.5-flash-image"},
      "search": {"daily_limit": 100, "free_daily_limit": 100, "cost_per_search": 0.5},
      "features": {"web_search": true}
    }
    ```

    Environment variables win over file values.

    Args:
        config_path: Path to config file. Uses DEFAULT_CONFIG_PATH if None.

    Returns:
        WhimcraftConfig instance with loaded values.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    data: dict[str, Any] = {}

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        except OSError as e:
            logger.warning("Cannot read %s: %s. Using defaults.", path, e)

    if not isinstance(data, dict):
        logger.warning("Config in %s is not an object. Using defaults.", path)
        data = {}

    config = _parse_config(data)
    _apply_env(config)
    return config


def _parse_config(data: dict[str, Any]) -> WhimcraftConfig:
    """Parse config dictionary into WhimcraftConfig."""
    data_dir: Path | None = None
    if isinstance(data.get("data_dir"), str):
        data_dir = Path(data["data_dir"]).expanduser()

    models_data = data.get("models", {})
    if not isinstance(models_data, dict):
        models_data = {}
    models = ModelConfig(
        **{k: str(v) for k, v in models_data.items() if k in ("main", "image")}
    )

    search_data = data.get("search", {})
    if not isinstance(search_data, dict):
        search_data = {}
    try:
        search = SearchLimits(
            daily_limit=int(search_data.get("daily_limit", 100)),
            free_daily_limit=int(search_data.get("free_daily_limit", 100)),
            cost_per_search=float(search_data.get("cost_per_search", 0.5)),
        )
    except (TypeError, ValueError) as e:
        logger.warning("Invalid search limits (%s). Using defaults.", e)
        search = SearchLimits()

    features = data.get("features", {})
    if not isinstance(features, dict):
        features = {}

    return WhimcraftConfig(
        data_dir=data_dir,
        models=models,
        search=search,
        use_web_search=bool(features.get("web_search", False)),
    )


def _apply_env(config: WhimcraftConfig) -> None:
    """Overlay environment variables onto a parsed config."""
    if os.getenv("WHIMCRAFT_DATA_DIR"):
        config.data_dir = Path(os.environ["WHIMCRAFT_DATA_DIR"]).expanduser()

    config.models.main = os.getenv("WHIMCRAFT_MAIN_MODEL", config.models.main)
    config.models.image = os.getenv("WHIMCRAFT_IMAGE_MODEL", config.models.image)

    config.use_web_search = _env_flag("WHIMCRAFT_USE_WEB_SEARCH", config.use_web_search)

    config.google_api_key = os.getenv("GOOGLE_SEARCH_API_KEY", config.google_api_key)
    config.google_engine_id = os.getenv("GOOGLE_SEARCH_ENGINE_ID", config.google_engine_id)
    config.groq_api_key = os.getenv("GROQ_API_KEY", config.groq_api_key)
    config.extraction_model = os.getenv("GROQ_MODEL", config.extraction_model)
