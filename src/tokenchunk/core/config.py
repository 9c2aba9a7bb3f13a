from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from typing import Optional, Dict, Any, Tuple, Type
from pathlib import Path


class Settings(BaseSettings):
    # Code chunking limits (clamped by chunking.limits before use)
    CHUNK_MAX_TOKENS: int = 512
    CHUNK_MAX_LINE: int = 100
    CHUNK_OVERLAP_TOKENS: int = 64

    # Tokenizer
    TOKENIZER_ENCODING: str = "cl100k_base"

    # Observability
    LOG_FORMAT: str = "auto"  # json|plain|auto

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Config file values arrive as init kwargs and rank below the environment
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    def chunking_config(self) -> Dict[str, Any]:
        """Return the mapping understood by ``normalize_limits``."""
        return {
            "chunk_max_tokens": self.CHUNK_MAX_TOKENS,
            "chunk_max_line": self.CHUNK_MAX_LINE,
            "chunk_overlap_tokens": self.CHUNK_OVERLAP_TOKENS,
        }

    @classmethod
    def load_config(cls, config_file: Optional[str] = None) -> "Settings":
        """Load settings with config file -> env -> CLI precedence."""
        config_data: Dict[str, Any] = {}

        # Find config file
        if config_file:
            config_path = Path(config_file)
        else:
            # Auto-discover .tokenchunk.{yaml,yml,toml}
            for ext in ["yaml", "yml", "toml"]:
                config_path = Path(f".tokenchunk.{ext}")
                if config_path.exists():
                    break
            else:
                config_path = None

        if config_path and config_path.exists():
            if config_path.suffix in [".yaml", ".yml"]:
                import yaml  # type: ignore[import-untyped]

                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            elif config_path.suffix == ".toml":
                import tomllib

                with open(config_path, "rb") as f:
                    config_data = tomllib.load(f)

        # Environment variables and CLI args override file values
        return cls(**config_data)


# Default settings - replaced by load_config() during CLI startup
SETTINGS = Settings()
