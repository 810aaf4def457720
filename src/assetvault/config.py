"""Configuration management for the AssetVault sync agent."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    # Fallback to project root .env
    load_dotenv()


class ConfigError(Exception):
    """Raised when required configuration is missing."""


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Server settings
        self.server_url = os.getenv(
            "ASSETVAULT_SERVER_URL", "http://localhost:3000"
        ).rstrip("/")
        self.api_key = os.getenv("ASSETVAULT_API_KEY", "")
        self.machine_id = os.getenv("ASSETVAULT_MACHINE_ID", "")

        # Network settings
        self.request_timeout = float(os.getenv("ASSETVAULT_REQUEST_TIMEOUT", "30"))
        self.max_retries = int(os.getenv("ASSETVAULT_MAX_RETRIES", "3"))

        # Polling interval in seconds
        self.sync_interval = float(os.getenv("ASSETVAULT_SYNC_INTERVAL", "30"))

        # Database settings
        default_db_path = str(Path.home() / ".assetvault" / "sync.db")
        self.database_path = Path(
            os.getenv("ASSETVAULT_DATABASE_PATH", default_db_path)
        ).expanduser()

        # Ensure directories exist
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Ensure required directories exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

    def validate_remote(self) -> None:
        """Check that everything needed to reach the server is configured.

        Raises:
            ConfigError: If the server URL, API key or machine id is missing
        """
        missing = []
        if not self.server_url:
            missing.append("ASSETVAULT_SERVER_URL")
        if not self.api_key:
            missing.append("ASSETVAULT_API_KEY")
        if not self.machine_id:
            missing.append("ASSETVAULT_MACHINE_ID")

        if missing:
            raise ConfigError(f"Missing configuration: {', '.join(missing)}")


def get_config() -> Config:
    """Get application configuration."""
    return Config()
