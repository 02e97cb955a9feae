"""Configuration manager reading secrets from the environment."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from finsight.utils.exceptions import ConfigurationError
from finsight.utils.logger import get_home_dir


@dataclass
class Config:
    """System configuration."""
    backend_url: str
    service_key: str
    gemini_api_key: str
    storage_root: Optional[str] = None

    @property
    def database_path(self) -> Path:
        """SQLite database file backing the relational tables."""
        url = self.backend_url
        if url.startswith("sqlite:///"):
            url = url[len("sqlite:///"):]
        return Path(url)

    @property
    def storage_path(self) -> Path:
        """Root directory of the object storage buckets."""
        if self.storage_root:
            return Path(self.storage_root)
        return get_home_dir() / "storage"


class ConfigManager:
    """Loads system configuration from environment variables and .env files."""

    BACKEND_URL_VAR = "FINSIGHT_BACKEND_URL"
    SERVICE_KEY_VAR = "FINSIGHT_SERVICE_KEY"
    GEMINI_API_KEY_VAR = "GEMINI_API_KEY"
    STORAGE_ROOT_VAR = "FINSIGHT_STORAGE_ROOT"

    def __init__(self, env_file: Optional[Path] = None):
        self.env_file = env_file

    def load_config(self) -> Config:
        """Load configuration, reading a .env file first when present."""
        if self.env_file is not None:
            load_dotenv(self.env_file)
        else:
            load_dotenv()

        return Config(
            backend_url=os.getenv(self.BACKEND_URL_VAR, ""),
            service_key=os.getenv(self.SERVICE_KEY_VAR, ""),
            gemini_api_key=os.getenv(self.GEMINI_API_KEY_VAR, ""),
            storage_root=os.getenv(self.STORAGE_ROOT_VAR) or None
        )

    def validate_config(self, config: Config) -> Tuple[bool, str]:
        """Validate configuration values."""
        if not config.backend_url:
            return False, "Backend URL is required"

        if not config.service_key:
            return False, "Backend service key is required"

        if not config.gemini_api_key:
            return False, "Gemini API key is required"

        return True, "Configuration is valid"

    def require_valid(self, config: Config) -> Config:
        """Return config unchanged or raise ConfigurationError."""
        is_valid, message = self.validate_config(config)
        if not is_valid:
            raise ConfigurationError(f"Server configuration error: {message}")
        return config
