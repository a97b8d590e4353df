# src/quota_library/credential_store.py

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core.constants import PROFILE_KEY_PREFIX
from .core.errors import ConfigurationError
from .core.types import Account

lib_logger = logging.getLogger("quota_library")

CONFIGURE_HINT = "Run `clawdbot configure` to add accounts."


def _get_home_dir() -> Path:
    """Get the home directory (HOME first, so tests can redirect it)."""
    home = os.environ.get("HOME")
    return Path(home) if home else Path.home()


def candidate_profile_paths(home: Optional[Path] = None) -> List[Path]:
    """Known auth-profiles.json locations, most specific first."""
    base = home or _get_home_dir()
    return [
        base / ".openclaw" / "agents" / "main" / "agent" / "auth-profiles.json",
        base / ".openclaw" / "agent" / "auth-profiles.json",
    ]


def find_auth_profiles(
    explicit_path: Optional[str] = None, home: Optional[Path] = None
) -> Path:
    """
    Locate the auth profiles file.

    Checks an explicit path (argument or QUOTA_AUTH_PROFILES) first, then
    the known locations under the home directory.

    Raises:
        ConfigurationError: If no profiles file exists
    """
    explicit = explicit_path or os.environ.get("QUOTA_AUTH_PROFILES")
    if explicit:
        path = Path(explicit).expanduser()
        if path.is_file():
            return path
        raise ConfigurationError(f"Auth profiles file not found: {path}", CONFIGURE_HINT)

    candidates = candidate_profile_paths(home)
    for path in candidates:
        if path.is_file():
            lib_logger.debug(f"Using auth profiles at {path}")
            return path

    raise ConfigurationError(
        "No Antigravity auth profiles found.\n"
        f"Expected at: {candidates[0]}",
        CONFIGURE_HINT,
    )


def parse_accounts(profiles: Dict[str, Any]) -> List[Account]:
    """
    Extract Antigravity accounts from a parsed auth-profiles document.

    Entries are kept in file order; that order breaks ranking ties.
    """
    entries = profiles.get("profiles") or {}
    if not isinstance(entries, dict):
        raise ConfigurationError(
            "Auth profiles file has an invalid 'profiles' section.", CONFIGURE_HINT
        )

    accounts = []
    for key, value in entries.items():
        if not key.startswith(PROFILE_KEY_PREFIX):
            continue
        if not isinstance(value, dict):
            lib_logger.warning(f"Skipping malformed auth profile {key!r}")
            continue
        accounts.append(
            Account(
                identity=key[len(PROFILE_KEY_PREFIX):],
                credential=value.get("refresh"),
                account_ref=value.get("projectId"),
            )
        )
    return accounts


def load_accounts(path: Path) -> List[Account]:
    """
    Read and parse the auth profiles file.

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or holds
            no Antigravity accounts
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            profiles = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to read auth profiles: {e}", CONFIGURE_HINT) from e

    if not isinstance(profiles, dict):
        raise ConfigurationError(
            "Failed to read auth profiles: top-level JSON must be an object",
            CONFIGURE_HINT,
        )

    accounts = parse_accounts(profiles)
    if not accounts:
        raise ConfigurationError(
            "No Antigravity accounts found in auth profiles.", CONFIGURE_HINT
        )

    lib_logger.debug(f"Loaded {len(accounts)} Antigravity accounts from {path}")
    return accounts


def discover_accounts(explicit_path: Optional[str] = None) -> List[Account]:
    """Find the profiles file and load its accounts in one step."""
    return load_accounts(find_auth_profiles(explicit_path))
