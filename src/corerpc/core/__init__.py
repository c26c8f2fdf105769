"""Core services for corerpc."""

from .config import (
    DEFAULT_CONFIG_DIR,
    ConfigContext,
    ConfigManager,
    ConfigurationError,
    CoreRPCConfig,
    CredentialStore,
)

__all__ = [
    "ConfigContext",
    "ConfigManager",
    "ConfigurationError",
    "CoreRPCConfig",
    "CredentialStore",
    "DEFAULT_CONFIG_DIR",
]
