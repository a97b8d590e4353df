"""
Unit tests for quota_library/credential_store.py - account source
"""
import json

import pytest

from quota_library.core.errors import ConfigurationError
from quota_library.credential_store import (
    candidate_profile_paths,
    discover_accounts,
    find_auth_profiles,
    load_accounts,
)


def write_profiles(path, profiles):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(profiles), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clear_profile_env(monkeypatch):
    monkeypatch.delenv("QUOTA_AUTH_PROFILES", raising=False)


class TestFindAuthProfiles:
    """Test profile file discovery."""

    def test_prefers_agents_main_path(self, tmp_path):
        first, second = candidate_profile_paths(tmp_path)
        write_profiles(first, {})
        write_profiles(second, {})
        assert find_auth_profiles(home=tmp_path) == first

    def test_falls_back_to_agent_path(self, tmp_path):
        _, second = candidate_profile_paths(tmp_path)
        write_profiles(second, {})
        assert find_auth_profiles(home=tmp_path) == second

    def test_missing_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            find_auth_profiles(home=tmp_path)
        assert "No Antigravity auth profiles found" in exc_info.value.message
        assert "clawdbot configure" in exc_info.value.hint

    def test_env_override(self, tmp_path, monkeypatch):
        custom = write_profiles(tmp_path / "custom.json", {})
        monkeypatch.setenv("QUOTA_AUTH_PROFILES", str(custom))
        assert find_auth_profiles(home=tmp_path / "nowhere") == custom

    def test_explicit_path_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            find_auth_profiles(str(tmp_path / "absent.json"))


class TestLoadAccounts:
    """Test parsing of auth-profiles.json."""

    def test_parses_antigravity_profiles_in_order(self, tmp_path):
        path = write_profiles(
            tmp_path / "auth-profiles.json",
            {
                "profiles": {
                    "google-antigravity:z@example.com": {"refresh": "r-z", "projectId": "p-z"},
                    "openai:someone": {"key": "sk"},
                    "google-antigravity:a@example.com": {"refresh": "r-a"},
                }
            },
        )
        accounts = load_accounts(path)

        assert [a.identity for a in accounts] == ["z@example.com", "a@example.com"]
        assert accounts[0].credential == "r-z"
        assert accounts[0].account_ref == "p-z"
        assert accounts[1].account_ref is None

    def test_no_matching_accounts(self, tmp_path):
        path = write_profiles(tmp_path / "p.json", {"profiles": {"openai:x": {}}})
        with pytest.raises(ConfigurationError) as exc_info:
            load_accounts(path)
        assert "No Antigravity accounts" in exc_info.value.message

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_accounts(path)
        assert exc_info.value.message.startswith("Failed to read auth profiles")

    def test_discover_accounts(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        first, _ = candidate_profile_paths(tmp_path)
        write_profiles(
            first, {"profiles": {"google-antigravity:a@example.com": {"refresh": "r"}}}
        )
        accounts = discover_accounts()
        assert len(accounts) == 1
