"""
Civic Portal Configuration Management
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

from dotenv import load_dotenv


DEFAULT_API_BASE_URL = "http://localhost:8080"


@dataclass
class PortalConfig:
    """Configuration for the Civic Portal client"""

    # API settings
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = 30.0

    # Session settings
    storage_file: str = "storage.json"
    refresh_interval: int = 600  # 10 minutes
    admin: bool = False

    # Shell settings
    history_file: str = ".civicportal_history"
    page_size: int = 20

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    environment: str = "development"
    verbose: bool = False

    # Paths
    config_dir: str = field(default_factory=lambda: str(Path.home() / ".civicportal"))

    def __post_init__(self):
        """Initialize paths and directories"""
        Path(self.config_dir).mkdir(parents=True, exist_ok=True)

        if not os.path.isabs(self.history_file):
            self.history_file = str(Path(self.config_dir) / self.history_file)
        if not os.path.isabs(self.storage_file):
            self.storage_file = str(Path(self.config_dir) / self.storage_file)

        self.api_base_url = self.api_base_url.rstrip("/")

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file"""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = json.load(f)
                for key, value in data.items():
                    if hasattr(self, key):
                        setattr(self, key, value)
            self.api_base_url = self.api_base_url.rstrip("/")

    def save_to_file(self, config_path: Optional[str] = None) -> None:
        """Save configuration to JSON file"""
        path = Path(config_path or (Path(self.config_dir) / "config.json"))
        with open(path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load_default(cls, env_file: Optional[str] = None) -> "PortalConfig":
        """Load default configuration from user config directory, .env and environment"""
        load_dotenv(env_file)

        config_dir = os.environ.get("CIVIC_CONFIG_DIR")
        config = cls(config_dir=config_dir) if config_dir else cls()

        default_config_path = Path(config.config_dir) / "config.json"
        if default_config_path.exists():
            config.load_from_file(str(default_config_path))

        # Environment wins over the config file
        config._load_from_env()

        return config

    def _load_from_env(self) -> None:
        """Load configuration from environment variables"""
        env_mappings = {
            "CIVIC_API_BASE_URL": ("api_base_url", lambda x: x.rstrip("/")),
            "CIVIC_REQUEST_TIMEOUT": ("timeout", float),
            "CIVIC_REFRESH_INTERVAL": ("refresh_interval", int),
            "CIVIC_PAGE_SIZE": ("page_size", int),
            "CIVIC_LOG_LEVEL": "log_level",
            "CIVIC_LOG_FILE": "log_file",
            "CIVIC_ENVIRONMENT": "environment",
            "CIVIC_VERBOSE": ("verbose", lambda x: x.lower() == "true"),
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(mapping, tuple):
                    attr, converter = mapping
                    setattr(self, attr, converter(value))
                else:
                    setattr(self, mapping, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return asdict(self)
