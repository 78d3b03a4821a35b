"""
Configuration management for hopfetch
"""

import json
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional

import aiohttp

from hopfetch.exceptions import ConfigError


def _default_user_agent() -> str:
    from hopfetch import __version__
    return f"hopfetch/{__version__} aiohttp/{aiohttp.__version__}"


@dataclass
class Config:
    """hopfetch configuration settings"""

    # Request defaults
    user_agent: str = field(default_factory=_default_user_agent)
    accept: str = "*/*"

    # Redirect chain
    max_redirects: Optional[int] = 20  # None = follow forever
    timeout: Optional[float] = None  # seconds for the whole operation

    # Download settings
    download_dir: Optional[str] = None  # None = system temp dir
    temp_prefix: str = "down-"
    default_filename: str = "~download"
    progress_interval: float = 0.1  # seconds

    _config_path: Optional[Path] = field(default=None, repr=False)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default config file path"""
        config_dir = Path.home() / ".config" / "hopfetch"
        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir / "config.json"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load configuration from file"""
        config_path = path or cls.get_default_config_path()

        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                raise ConfigError(f"Cannot read config {config_path}: {e}") from e

            known = {f.name for f in fields(cls) if not f.name.startswith("_")}
            unknown = set(data) - known
            if unknown:
                raise ConfigError(f"Unknown config keys in {config_path}: {', '.join(sorted(unknown))}")

            config = cls(**data)
            config._config_path = config_path
            return config

        # Return default config if file doesn't exist
        config = cls()
        config._config_path = config_path
        return config

    def save(self, path: Optional[Path] = None) -> None:
        """Save configuration to file"""
        config_path = path or self._config_path or self.get_default_config_path()

        # Convert to dict, excluding private fields
        data = {k: v for k, v in asdict(self).items() if not k.startswith("_")}

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)
