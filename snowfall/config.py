"""
Configuration management with environment variable support.

All settings can be overridden via environment variables.
Automatically loads .env file if present.
"""

import os
from pathlib import Path
from typing import Literal
from dotenv import load_dotenv

# Load .env file from project root (one level up from snowfall/)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Logging configuration
LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = os.getenv("LOG_LEVEL", "INFO")

# Mock worker mode (log worker messages instead of publishing them)
MOCK_MODE: bool = os.getenv("MOCK_MODE", "false").lower() == "true"

# Preference storage
STORAGE_KEY: str = "snow"
PREFERENCE_FILE: str = os.getenv("PREFERENCE_FILE", "data/preferences.json")

# Page presentation
TITLE_PREFIX: str = "❄️ "
PAGE_TITLE: str = os.getenv("PAGE_TITLE", "Snowfall")
VIEWPORT_WIDTH: int = int(os.getenv("VIEWPORT_WIDTH", "1280"))
VIEWPORT_HEIGHT: int = int(os.getenv("VIEWPORT_HEIGHT", "720"))

# Resize notifications forwarded to the worker at most once per window
RESIZE_THROTTLE_MS: int = int(os.getenv("RESIZE_THROTTLE_MS", "33"))

# MQTT configuration
MQTT_ENABLED: bool = os.getenv("MQTT_ENABLED", "false").lower() == "true"
MQTT_BROKER: str = os.getenv("MQTT_BROKER", "localhost")
MQTT_PORT: int = int(os.getenv("MQTT_PORT", "1883"))
MQTT_USERNAME: str | None = os.getenv("MQTT_USERNAME")
MQTT_PASSWORD: str | None = os.getenv("MQTT_PASSWORD")
MQTT_CLIENT_ID: str = os.getenv("MQTT_CLIENT_ID", "snowfall")
