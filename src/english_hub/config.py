"""Application configuration using pydantic-settings."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if "server" in data:
            flattened["host"] = data["server"].get("host")
            flattened["port"] = data["server"].get("port")
        if "storage" in data:
            flattened["data_dir"] = data["storage"].get("data_dir")
            flattened["storage_key"] = data["storage"].get("key")
        if "openai" in data:
            flattened["generation_model"] = data["openai"].get("generation_model")
            flattened["feedback_model"] = data["openai"].get("feedback_model")
            flattened["generation_timeout_seconds"] = data["openai"].get("timeout_seconds")

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI (generation endpoints are disabled without a key)
    openai_api_key: str | None = Field(default=None)
    generation_model: str = Field(default="gpt-4o-mini")
    feedback_model: str = Field(default="gpt-4o")
    generation_timeout_seconds: float = Field(default=60.0)

    # Authentication (optional: None disables auth)
    app_secret: str | None = Field(default=None)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Storage
    data_dir: Path | None = Field(default=None)
    storage_key: str = Field(default="english-hub-user")

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def progress_dir(self) -> Path:
        base = self.data_dir or self.project_root / "data"
        return base / "progress"

    @property
    def vocabulary_path(self) -> Path:
        return self.project_root / "config" / "vocabulary.yaml"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )
