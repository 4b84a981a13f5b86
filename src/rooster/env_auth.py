"""Environment-based credential lookup for Rooster.

Reads the Pylon API token from environment variables, optionally after
loading a ``.env`` file with python-dotenv.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

TOKEN_ALTERNATIVES = ("PYLON_TOKEN", "PYLON_API_KEY")
DOTENV_CANDIDATES = (".env", ".env.local")


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    api_token_var: str = "PYLON_API_TOKEN"


class EnvironmentAuthManager:
    """Resolves the Pylon API token from the process environment."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self._dotenv_loaded: Path | None = None

        if config.load_dotenv:
            self._load_dotenv()

    @property
    def dotenv_loaded(self) -> Path | None:
        return self._dotenv_loaded

    def _load_dotenv(self) -> None:
        """Load the first existing .env file; existing variables win."""
        candidates = [self.config.dotenv_path] if self.config.dotenv_path else list(DOTENV_CANDIDATES)
        for location in candidates:
            env_path = Path(location)
            if env_path.exists():
                load_dotenv(str(env_path))
                self._dotenv_loaded = env_path
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return
        if self.config.dotenv_path:
            self.logger.warning(f"dotenv file not found: {self.config.dotenv_path}")

    def get_api_token(self) -> str | None:
        """Get the Pylon API token from environment variables."""
        token = os.getenv(self.config.api_token_var)
        if token:
            self.logger.debug(f"Found Pylon API token in {self.config.api_token_var}")
            return token

        for alt_var in TOKEN_ALTERNATIVES:
            token = os.getenv(alt_var)
            if token:
                self.logger.debug(f"Found Pylon API token in {alt_var}")
                return token

        return None

    def get_authentication_recommendations(self) -> list[str]:
        if self.get_api_token():
            return []
        return [
            f"Set the {self.config.api_token_var} environment variable",
            f"Or create a .env file with {self.config.api_token_var}=your_token",
            "Or set pylon.api_token in the configuration file",
        ]


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = [
    "EnvAuthConfig",
    "EnvironmentAuthManager",
    "create_env_auth_manager",
    "TOKEN_ALTERNATIVES",
]
