"""Configuration and credential management for corerpc."""

from __future__ import annotations

import base64
import json
import os
import tomllib
from collections.abc import Callable
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import tomli_w
import typer
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import BaseModel, Field, ValidationError

DEFAULT_CONFIG_DIR = Path(os.environ.get("CORERPC_HOME", Path.home() / ".corerpc"))
CONFIG_FILENAME = "config.toml"
CREDENTIALS_FILENAME = "credentials.json"
PBKDF_ITERATIONS = 390_000

DEFAULT_PORTS = {"main": 8332, "test": 18332, "signet": 38332, "regtest": 18443}

ChainName = Literal["main", "test", "signet", "regtest"]


class ConfigurationError(RuntimeError):
    """Raised when configuration or credential loading fails."""


class CoreRPCConfig(BaseModel):
    """Persisted node connection settings."""

    config_version: int = 1
    network: ChainName = "main"
    rpc_url: str = "http://127.0.0.1:8332"
    rpc_user: str | None = None
    timeout_seconds: float = Field(default=30.0, gt=0)
    # Node version as reported by getnetworkinfo (e.g. 250000); None means latest.
    node_version: int | None = None


@dataclass
class ConfigContext:
    """Represents a loaded configuration and the decrypted RPC password."""

    config: CoreRPCConfig
    rpc_password: str | None
    passphrase: str | None


class CredentialStore:
    """Encrypts/decrypts the RPC password using a passphrase-derived key."""

    def __init__(self, credentials_path: Path) -> None:
        self.credentials_path = credentials_path

    def exists(self) -> bool:
        return self.credentials_path.exists()

    def save(self, passphrase: str, secret: str) -> None:
        salt = os.urandom(16)
        key = self._derive_key(passphrase, salt)
        token = Fernet(key).encrypt(secret.encode("utf-8"))
        payload = {
            "salt": base64.b64encode(salt).decode("ascii"),
            "ciphertext": base64.b64encode(token).decode("ascii"),
            "iterations": PBKDF_ITERATIONS,
        }
        self.credentials_path.write_text(json.dumps(payload, indent=2))

    def load(self, passphrase: str) -> str:
        try:
            data = json.loads(self.credentials_path.read_text())
            salt = base64.b64decode(data["salt"])
            ciphertext = base64.b64decode(data["ciphertext"])
            iterations = int(data.get("iterations", PBKDF_ITERATIONS))
        except (OSError, ValueError, KeyError) as exc:
            raise ConfigurationError(f"Unreadable credentials file {self.credentials_path}: {exc}") from exc
        key = self._derive_key(passphrase, salt, iterations)
        try:
            decrypted = Fernet(key).decrypt(ciphertext)
        except InvalidToken as exc:
            raise ConfigurationError("Invalid passphrase for corerpc credentials") from exc
        return decrypted.decode("utf-8")

    @staticmethod
    def _derive_key(passphrase: str, salt: bytes, iterations: int = PBKDF_ITERATIONS) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
        )
        return base64.urlsafe_b64encode(kdf.derive(passphrase.encode("utf-8")))


class ConfigManager:
    """Handles loading, prompting, and persisting node connection settings."""

    def __init__(
        self,
        config_dir: Path | None = None,
        prompt_fn: Callable[..., str] | None = None,
        echo_fn: Callable[[str], None] | None = None,
        override_config_path: Path | None = None,
    ) -> None:
        self.config_dir = config_dir or Path(os.environ.get("CORERPC_HOME", DEFAULT_CONFIG_DIR))
        self.config_path = self.config_dir / CONFIG_FILENAME
        self.credentials_path = self.config_dir / CREDENTIALS_FILENAME
        self._credential_store = CredentialStore(self.credentials_path)
        self._prompt = prompt_fn or self._default_prompt
        self._echo = echo_fn or typer.echo
        self.override_config_path = override_config_path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def ensure(
        self,
        *,
        interactive: bool = False,
        rpc_url: str | None = None,
        rpc_user: str | None = None,
        rpc_password: str | None = None,
        passphrase: str | None = None,
    ) -> ConfigContext:
        """Load configuration and resolve the RPC password.

        Explicit arguments win over environment variables, which win over the
        persisted files. Nothing is written to disk.
        """

        config = self.load()
        updates: dict[str, object] = {}
        url = rpc_url or os.environ.get("CORERPC_URL")
        if url:
            updates["rpc_url"] = url
        user = rpc_user or os.environ.get("CORERPC_USER")
        if user:
            updates["rpc_user"] = user
        if updates:
            config = self._validate({**config.model_dump(), **updates})

        password = rpc_password if rpc_password is not None else os.environ.get("CORERPC_PASSWORD")
        if password is not None:
            return ConfigContext(config=config, rpc_password=password, passphrase=passphrase)

        if not self._credential_store.exists():
            return ConfigContext(config=config, rpc_password=None, passphrase=passphrase)

        password, used_passphrase = self._load_password(passphrase=passphrase, interactive=interactive)
        return ConfigContext(config=config, rpc_password=password, passphrase=used_passphrase)

    def configure(
        self,
        *,
        rpc_url: str | None = None,
        rpc_user: str | None = None,
        network: str | None = None,
        timeout_seconds: float | None = None,
        node_version: int | None = None,
        rpc_password: str | None = None,
        passphrase: str | None = None,
    ) -> CoreRPCConfig:
        """Persist connection settings and, optionally, the encrypted password."""

        updates: dict[str, object] = {}
        if network is not None:
            updates["network"] = network
            if rpc_url is None and network in DEFAULT_PORTS:
                updates["rpc_url"] = f"http://127.0.0.1:{DEFAULT_PORTS[network]}"
        if rpc_url is not None:
            updates["rpc_url"] = rpc_url
        if rpc_user is not None:
            updates["rpc_user"] = rpc_user
        if timeout_seconds is not None:
            updates["timeout_seconds"] = float(timeout_seconds)
        if node_version is not None:
            updates["node_version"] = int(node_version)
        config = self._update_base_config(**updates)

        if rpc_password is not None:
            passphrase_value = passphrase or os.environ.get("CORERPC_PASSPHRASE")
            if not passphrase_value:
                passphrase_value = self._prompt(
                    "Create a passphrase to secure the RPC password",
                    hide_input=True,
                    confirmation_prompt=True,
                )
            self._credential_store.save(passphrase_value, rpc_password)
        self._echo("✅ corerpc configuration saved to " + str(self.config_path))
        return config

    def load(self) -> CoreRPCConfig:
        data: dict[str, Any] = self._read_config_dict(self.config_path)
        if self.override_config_path:
            data = self._merge_dicts(data, self._read_config_dict(self.override_config_path))
        return self._validate(data)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _validate(self, data: dict[str, Any]) -> CoreRPCConfig:
        try:
            return CoreRPCConfig(**data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    def _save_config(self, config: CoreRPCConfig) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(tomli_w.dumps(config.model_dump(exclude_none=True)))

    def _update_base_config(self, **updates: object) -> CoreRPCConfig:
        current = self._read_config_dict(self.config_path)
        current = current.copy() if current else {}
        current.update(updates)
        base_config = self._validate(current)
        self._save_config(base_config)
        return base_config

    def _read_config_dict(self, path: Path | None) -> dict[str, Any]:
        if path is None:
            return {}
        if not path.exists():
            return {}
        try:
            return tomllib.loads(path.read_text())
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Failed to load config from {path}: {exc}") from exc

    def _merge_dicts(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        result = deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def _load_password(
        self,
        *,
        passphrase: str | None,
        interactive: bool,
    ) -> tuple[str, str]:
        attempts = 3
        while True:
            pwd = passphrase or os.environ.get("CORERPC_PASSPHRASE")
            if not pwd:
                if not interactive:
                    raise ConfigurationError("Passphrase required to decrypt the stored RPC password")
                pwd = self._prompt("Enter corerpc passphrase", hide_input=True)
            try:
                return self._credential_store.load(pwd), pwd
            except ConfigurationError:
                if not interactive:
                    raise
                attempts -= 1
                if attempts <= 0:
                    raise
                self._echo("❌ Invalid passphrase. Please try again.")
                passphrase = None

    @staticmethod
    def _default_prompt(
        message: str,
        *,
        hide_input: bool = False,
        confirmation_prompt: bool = False,
        default: str | None = None,
    ) -> str:
        if default is not None:
            return typer.prompt(message, default=default, hide_input=hide_input, confirmation_prompt=confirmation_prompt)
        return typer.prompt(message, hide_input=hide_input, confirmation_prompt=confirmation_prompt)


__all__ = [
    "CONFIG_FILENAME",
    "CREDENTIALS_FILENAME",
    "ConfigContext",
    "ConfigManager",
    "ConfigurationError",
    "CoreRPCConfig",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_PORTS",
]
