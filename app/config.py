"""
Configuration module for the application.

Handles reading environment variables for the PIM connection.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class Config:
    """
    Application configuration for the PIM media-file client.

    Attributes:
        base_uri: Root URI of the PIM, e.g. https://pim.example.com
        client_id: API connection client id
        secret: API connection secret
        username: API user name
        password: API user password
        timeout: Request timeout in seconds
        page_size: Default page size for listings
    """
    base_uri: str
    client_id: str
    secret: str
    username: str
    password: str
    timeout: float = 30.0
    page_size: int = 10


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


REQUIRED_VARIABLES = {
    "base_uri": "PIM_BASE_URI",
    "client_id": "PIM_CLIENT_ID",
    "secret": "PIM_SECRET",
    "username": "PIM_USERNAME",
    "password": "PIM_PASSWORD",
}

# Module-level cache for configuration
_config_instance: Config | None = None


def get_config() -> Config:
    """
    Get application configuration (singleton pattern).

    Reads configuration from environment variables.
    Loads .env file if present in the working directory.

    Environment variables:
        PIM_BASE_URI, PIM_CLIENT_ID, PIM_SECRET, PIM_USERNAME, PIM_PASSWORD: required
        PIM_TIMEOUT: Request timeout in seconds
            Default: 30
        PIM_PAGE_SIZE: Default page size for listings
            Default: 10

    Returns:
        Config instance with loaded configuration

    Raises:
        ConfigError: If a required variable is missing or a number is invalid
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file if it exists
    load_dotenv()

    values = {field: os.getenv(env, "").strip() for field, env in REQUIRED_VARIABLES.items()}
    missing = [REQUIRED_VARIABLES[field] for field, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        timeout = float(os.getenv("PIM_TIMEOUT", "30"))
        page_size = int(os.getenv("PIM_PAGE_SIZE", "10"))
    except ValueError as e:
        raise ConfigError(f"Invalid numeric configuration value: {e}") from e

    if page_size < 1:
        raise ConfigError(f"PIM_PAGE_SIZE must be a positive integer, got {page_size}")

    _config_instance = Config(timeout=timeout, page_size=page_size, **values)

    return _config_instance
