import os
import sys
from typing import Any, Literal

import orjson
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_PATH = "config/config.yaml"

# Plain variable names accepted alongside the CONFIG_GEMINI__* ones.
LEGACY_GEMINI_ENV = {
    "GEMINI_API_KEY": "api_key",
    "GEMINI_TEXT_MODEL": "text_model",
    "GEMINI_IMAGE_MODEL": "image_model",
}


class HTTPSConfig(BaseModel):
    """HTTPS configuration"""

    enabled: bool = Field(default=False, description="Enable HTTPS")
    key_file: str = Field(default="certs/privkey.pem", description="SSL private key file path")
    cert_file: str = Field(default="certs/fullchain.pem", description="SSL certificate file path")


class ServerConfig(BaseModel):
    """Server configuration"""

    host: str = Field(default="0.0.0.0", description="Server host address")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port number")
    api_key: str | None = Field(
        default=None,
        description="API key for authentication, if set, will enable API key validation",
    )
    https: HTTPSConfig = Field(default=HTTPSConfig(), description="HTTPS configuration")


class GeminiConfig(BaseModel):
    """Gemini API configuration"""

    api_key: str | None = Field(
        default=None, description="Gemini API key, required to reach the provider"
    )
    text_model: str = Field(
        default="models/gemini-1.5-flash-latest",
        description="Model used by the text chat endpoint",
    )
    image_model: str = Field(
        default="models/gemini-2.5-flash-image",
        description="Model used by the image generation/editing endpoint",
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_key_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class CORSConfig(BaseModel):
    """CORS configuration"""

    enabled: bool = Field(default=True, description="Enable CORS support")
    allow_origins: list[str] = Field(
        default=["*"], description="List of allowed origins for CORS requests"
    )
    allow_credentials: bool = Field(default=True, description="Allow credentials in CORS requests")
    allow_methods: list[str] = Field(
        default=["*"], description="List of allowed HTTP methods for CORS requests"
    )
    allow_headers: list[str] = Field(
        default=["*"], description="List of allowed headers for CORS requests"
    )

    @field_validator("allow_origins", "allow_methods", "allow_headers", mode="before")
    @classmethod
    def _parse_json_list(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().startswith("["):
            try:
                return orjson.loads(v)
            except orjson.JSONDecodeError as e:
                logger.warning(f"Failed to parse CORS list JSON string: {e}")
                return v
        return v


class LoggingConfig(BaseModel):
    """Logging configuration"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


class Config(BaseSettings):
    """Application configuration"""

    # Server configuration
    server: ServerConfig = Field(
        default=ServerConfig(),
        description="Server configuration, including host, port, and API key",
    )

    # CORS configuration
    cors: CORSConfig = Field(
        default=CORSConfig(),
        description="CORS configuration, allows cross-origin requests",
    )

    # Gemini API configuration
    gemini: GeminiConfig = Field(
        default=GeminiConfig(), description="Gemini API configuration"
    )

    # Logging configuration
    logging: LoggingConfig = Field(
        default=LoggingConfig(),
        description="Logging configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="CONFIG_",
        env_nested_delimiter="__",
        nested_model_default_partial_update=True,
        yaml_file=os.getenv("CONFIG_PATH", CONFIG_PATH),
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Read settings: init -> env -> yaml -> default"""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )


def extract_legacy_gemini_env() -> dict[str, str]:
    """Collect GEMINI_* variables that have no CONFIG_GEMINI__* counterpart set."""
    overrides: dict[str, str] = {}
    for env_name, field in LEGACY_GEMINI_ENV.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        prefixed = f"CONFIG_GEMINI__{field.upper()}"
        if prefixed in os.environ:
            logger.debug(f"Ignoring {env_name} because {prefixed} is set.")
            continue
        overrides[field] = value
    return overrides


def _merge_gemini_with_env(base: GeminiConfig, overrides: dict[str, str]) -> GeminiConfig:
    """Return a copy of `base` with legacy environment overrides applied."""
    if not overrides:
        return base
    gemini_dict = base.model_dump()
    gemini_dict.update(overrides)
    return GeminiConfig(**gemini_dict)


def initialize_config() -> Config:
    """
    Initialize the configuration.

    Returns:
        Config: Configuration object
    """
    try:
        legacy_overrides = extract_legacy_gemini_env()

        config = Config()  # type: ignore

        config.gemini = _merge_gemini_with_env(config.gemini, legacy_overrides)

        return config
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e!s}")
        sys.exit(1)
