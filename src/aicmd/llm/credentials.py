"""API key resolution.

Lookup order for a provider that needs a key:
1. ``<PROVIDER>_API_KEY`` from the environment or a .env.secrets file
2. A key previously found in the credential store (cached per process)
3. The local credential store, under service ``<provider>-api-key`` and the
   current user's account: the macOS Keychain (``security``) or the
   freedesktop Secret Service (``secret-tool``)

If all fail a CredentialError carrying remediation instructions is raised.
Providers that run locally (ollama) skip resolution.
"""

from __future__ import annotations

import asyncio
import getpass
import os
import shutil
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from aicmd.config.secrets import fetch_secret
from aicmd.errors import CredentialError
from aicmd.llm.providers import ProviderName, get_provider_spec
from aicmd.logging import get_logger

log = get_logger("credentials")

# Seconds allowed for a credential store query
STORE_TIMEOUT = 5.0

KeychainLookup = Callable[[str, str], Awaitable[str | None]]


def current_account() -> str:
    """Account name used for credential store entries."""
    user = os.environ.get("USER")
    if user:
        return user
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def store_command(service: str, account: str, platform: str | None = None) -> list[str] | None:
    """Command that prints the stored secret, or None if no store is supported."""
    platform = platform or sys.platform
    if platform == "darwin":
        return ["security", "find-generic-password", "-s", service, "-a", account, "-w"]
    if platform.startswith("linux"):
        return ["secret-tool", "lookup", "service", service, "account", account]
    return None


async def _reap(process: asyncio.subprocess.Process) -> None:
    """Kill a store query that is still running and wait for it to exit."""
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass  # Process already gone
    await process.wait()


async def lookup_keychain(service: str, account: str) -> str | None:
    """Query the local credential store.

    Returns None when the store is unavailable, the entry does not exist or
    the query fails.
    """
    command = store_command(service, account)
    if command is None or shutil.which(command[0]) is None:
        return None

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        log.debug("credential store unavailable: %s", e)
        return None

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=STORE_TIMEOUT)
    except asyncio.TimeoutError:
        await _reap(process)
        log.debug("credential store query timed out for %s", service)
        return None
    except asyncio.CancelledError:
        # The store may be holding an unlock dialog open
        await _reap(process)
        raise

    if process.returncode != 0:
        return None
    secret = stdout.decode("utf-8", errors="replace").strip()
    return secret or None


def remediation_message(provider: ProviderName) -> str:
    """Instructions for supplying a key, naming both lookup paths."""
    spec = get_provider_spec(provider)
    service = provider.keychain_service
    lines = [
        f"{spec.display_name} API key not found.",
        "",
        "Option 1: set the environment variable (e.g. in your shell profile)",
        f"  export {provider.env_var}='your-key'",
        "",
        "Option 2: add it to your system credential store",
        f"  macOS:  security add-generic-password -s '{service}' -a \"$USER\" -w 'your-key'",
        f"  Linux:  secret-tool store --label='{service}' service {service} account \"$USER\"",
    ]
    if spec.key_url:
        lines.extend(["", f"Get a key at: {spec.key_url}"])
    return "\n".join(lines)


class CredentialResolver:
    """Resolves and caches API keys per provider."""

    def __init__(
        self,
        *,
        keychain: KeychainLookup | None = None,
        secrets_path: Path | None = None,
        account: str | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            keychain: Credential store lookup, ``(service, account) -> key``.
            secrets_path: Explicit .env.secrets file.
            account: Account for store lookups. Defaults to the current user.
        """
        self._keychain = keychain or lookup_keychain
        self._secrets_path = secrets_path
        self._account = account
        self._cache: dict[ProviderName, str] = {}

    async def resolve(self, provider: ProviderName) -> str | None:
        """Return the API key for a provider.

        Returns:
            The key, or None for providers that need no key.

        Raises:
            CredentialError: No key in the environment or the credential store.
        """
        if not get_provider_spec(provider).requires_key:
            return None

        key = fetch_secret(provider.env_var, secrets_path=self._secrets_path)
        if key:
            return key

        cached = self._cache.get(provider)
        if cached:
            return cached

        account = self._account if self._account is not None else current_account()
        key = await self._keychain(provider.keychain_service, account)
        if key:
            log.debug("using %s key from credential store", provider.value)
            self._cache[provider] = key
            return key

        raise CredentialError(
            f"{provider.env_var} not set",
            provider=provider.value,
            remediation=remediation_message(provider),
        )

    def clear(self) -> None:
        """Forget keys found in the credential store."""
        self._cache.clear()
