"""
Environment-driven configuration for the todo sync client.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from services.errors import ConfigurationError

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ClientConfig:
    api_url: str
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "ClientConfig":
        """
        Read ``TODO_API_URL`` and ``TODO_API_TIMEOUT``.

        Raises:
            ConfigurationError: if the API URL is missing or the timeout
                is not a positive number.
        """
        if load_env_file:
            load_dotenv()

        api_url = os.getenv('TODO_API_URL', '').strip()
        if not api_url:
            raise ConfigurationError('TODO_API_URL must be provided in environment variables')

        raw_timeout = os.getenv('TODO_API_TIMEOUT', str(DEFAULT_TIMEOUT_SECONDS))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(f'TODO_API_TIMEOUT must be a number, got {raw_timeout!r}')
        if timeout <= 0:
            raise ConfigurationError('TODO_API_TIMEOUT must be positive')

        return cls(api_url=api_url.rstrip('/'), timeout=timeout)
