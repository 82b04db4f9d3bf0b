"""
Proxy secret handling.

The provider API key only ever lives on the proxy side: in the process
environment or in a local .env file (mode 600). Clients talk to the proxy
and never see it.
"""

import os
from pathlib import Path
from typing import Optional

import structlog
from dotenv import load_dotenv, set_key
from rich.console import Console
from rich.prompt import Prompt

console = Console()
logger = structlog.get_logger(__name__)

DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"


class CredentialManager:
    """Reads the proxy secret from the environment / .env and can prompt for it once."""

    def __init__(self, env_file: Path = Path(".env")):
        self.env_file = Path(env_file)
        if self.env_file.exists():
            # Values already in the process environment win over the file
            load_dotenv(self.env_file)
            self._restrict_permissions()
            logger.info("env_file_loaded", env_file=str(self.env_file))
        else:
            logger.debug("env_file_absent", env_file=str(self.env_file))

    def _restrict_permissions(self) -> None:
        if os.name == "nt":
            return
        try:
            os.chmod(self.env_file, 0o600)
        except OSError as e:
            logger.warning("env_file_chmod_failed", env_file=str(self.env_file), error=str(e))

    def get_api_key(self, key: str = DEFAULT_API_KEY_ENV) -> Optional[str]:
        """Current value of `key`, stripped; None when unset or blank. Never prompts."""
        value = (os.getenv(key) or "").strip()
        return value or None

    def get_credential(
        self,
        key: str,
        prompt_message: str,
        is_password: bool = False,
        required: bool = True,
    ) -> Optional[str]:
        """
        Return `key` from the environment, asking on the terminal if it is missing.

        A typed value is written to the .env file and exported to os.environ.

        Raises:
            ValueError: If required and the user enters nothing
        """
        existing = self.get_api_key(key)
        if existing:
            return existing

        logger.info("credential_prompt", key=key, required=required)
        console.print(f"\n[yellow][*] {key} is not set[/yellow]")
        console.print(f"   {prompt_message}\n")
        entered = Prompt.ask("   Enter value", password=is_password).strip()

        if not entered:
            if required:
                logger.error("credential_missing", key=key)
                raise ValueError(f"Required credential not provided: {key}")
            return None

        self._store(key, entered)
        return entered

    def _store(self, key: str, value: str) -> None:
        try:
            self.env_file.touch(exist_ok=True)
            set_key(str(self.env_file), key, value)
        except OSError as e:
            console.print(f"   [red][X] Could not write {self.env_file}: {e}[/red]\n")
            logger.error("credential_save_failed", key=key, error=str(e))
            raise
        os.environ[key] = value
        self._restrict_permissions()
        console.print(f"   [green][+] Saved {key} to {self.env_file}[/green]\n")
        logger.info("credential_saved", key=key, env_file=str(self.env_file))

    def ensure_api_key(self, key: str = DEFAULT_API_KEY_ENV) -> str:
        """Make sure the proxy secret exists, prompting once if it does not."""
        value = self.get_credential(
            key,
            "Provider API key used by the credential proxy (stored in .env)",
            is_password=True,
        )
        logger.info("api_key_present", key=key, masked=self.mask_credential(value or ""))
        return value  # type: ignore[return-value]

    @staticmethod
    def mask_credential(value: str, show_chars: int = 3) -> str:
        """Keep the first few characters: "sk-abcdef" -> "sk-******"."""
        if len(value) <= show_chars:
            return "***"
        return value[:show_chars] + "*" * (len(value) - show_chars)
