"""Settings for sandbelt: pydantic-settings over a TOML file and SANDBELT_ env vars.

Settings live in ``~/.config/sandbelt/config.toml``. Environment variables
override the file using the ``SANDBELT_`` prefix and ``__`` as the nested
delimiter (e.g. ``SANDBELT_PATHS__BASE_DIR``).

Priority (highest wins): init args > env vars > config.toml

Usage::

    from sandbelt.config import get_settings

    s = get_settings()
    print(s.container.template)
    print(s.logs_dir)
"""

from __future__ import annotations

from functools import cached_property
from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

CONFIG_PATH = Path.home() / ".config" / "sandbelt" / "config.toml"

# ---------------------------------------------------------------------------
# Sub-models (each maps to a [section] in config.toml)
# ---------------------------------------------------------------------------


class _StrictModel(BaseModel):
    """Sub-models reject unknown keys, so a misspelt option is an error."""

    model_config = {"extra": "forbid"}


class PathsConfig(_StrictModel):
    base_dir: Path = Path.home() / ".sandbelt"

    @field_validator("base_dir")
    @classmethod
    def expand_base_dir(cls, v: Path) -> Path:
        return Path(v).expanduser()


class ContainerConfig(_StrictModel):
    cli: str = "docker"
    template: str = "gastown:latest"
    ready_timeout: float = 30.0  # seconds
    ready_poll_interval: float = 0.5  # seconds

    @field_validator("ready_poll_interval")
    @classmethod
    def clamp_poll_interval(cls, v: float) -> float:
        return max(0.0, v)


class AgentConfig(_StrictModel):
    binary: str = "claude"
    output_format: str = "stream-json"
    name_prefix: str = "gastown"  # generated names: <prefix>-<epoch ms>
    prompt_preview_chars: int = 100


class LoggingConfig(_StrictModel):
    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        toml_file=CONFIG_PATH,
        env_prefix="SANDBELT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    paths: PathsConfig = PathsConfig()
    container: ContainerConfig = ContainerConfig()
    agent: AgentConfig = AgentConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init > env vars > config.toml."""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    # --- Computed properties ---

    @cached_property
    def base_dir(self) -> Path:
        return self.paths.base_dir

    @cached_property
    def logs_dir(self) -> Path:
        return self.base_dir / "logs"

    @cached_property
    def output_dir(self) -> Path:
        return self.base_dir / "output"

    @cached_property
    def worktrees_dir(self) -> Path:
        return self.base_dir / "worktrees"


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_settings: Settings | None = None


def get_settings() -> Settings:
    """Lazy cached singleton."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = Settings()
    return _settings
