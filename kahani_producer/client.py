"""Gemini client construction from environment configuration."""

import os

from google import genai

from kahani_producer.constants import API_KEY_ENV_VARS
from kahani_producer.errors import ConfigurationError


def get_api_key() -> str | None:
    """First non-empty API key from the environment, or None."""
    for name in API_KEY_ENV_VARS:
        value = (os.environ.get(name) or "").strip()
        if value:
            return value
    return None


def make_client(api_key: str | None = None) -> genai.Client:
    api_key = api_key or get_api_key()
    if not api_key:
        raise ConfigurationError(
            f"API key is missing. Set one of: {', '.join(API_KEY_ENV_VARS)}"
        )
    return genai.Client(api_key=api_key)
