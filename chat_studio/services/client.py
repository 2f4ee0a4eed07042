from google import genai
from loguru import logger

from chat_studio.utils.config import GeminiConfig
from chat_studio.utils.errors import ConfigurationError


def create_genai_client(config: GeminiConfig) -> genai.Client:
    """Build the Gemini API client from configuration. Raises if no API key is configured."""
    if not config.api_key:
        raise ConfigurationError("GEMINI_API_KEY is not set in environment")

    client = genai.Client(api_key=config.api_key)
    logger.info(
        f"Gemini client ready (text model: {config.text_model}, image model: {config.image_model})"
    )
    return client
