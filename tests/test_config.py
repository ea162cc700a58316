"""Tests for age identity lookup."""

from __future__ import annotations

from pathlib import Path

import pytest

from sopsreader.config import default_key_file, parse_identities, resolve_identities
from sopsreader.exceptions import IdentityNotFoundError

KEY_A = "AGE-SECRET-KEY-1AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
KEY_B = "AGE-SECRET-KEY-1BBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBB"
KEY_C = "AGE-SECRET-KEY-1CCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCCC"


def _key_file(path: Path, *keys: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["# created: 2024-05-01T12:00:00Z", "# public key: age1example"]
    path.write_text("\n".join(lines + list(keys)) + "\n", encoding="utf-8")
    return path


class TestParseIdentities:
    """Tests for parse_identities."""

    def test_skips_comments_and_blank_lines(self) -> None:
        """Only secret key lines are returned, in order."""
        text = f"# comment\n\n{KEY_A}\n  {KEY_B}  \nnot-a-key\n"
        assert parse_identities(text) == [KEY_A, KEY_B]

    def test_empty(self) -> None:
        """No keys yields an empty list."""
        assert parse_identities("# only comments\n") == []


class TestDefaultKeyFile:
    """Tests for default_key_file."""

    def test_xdg_config_home(self, tmp_path: Path) -> None:
        """XDG_CONFIG_HOME is honoured."""
        assert default_key_file({"XDG_CONFIG_HOME": str(tmp_path)}) == tmp_path / "sops" / "age" / "keys.txt"

    def test_home_fallback(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Without XDG_CONFIG_HOME, ~/.config is used."""
        monkeypatch.setattr(Path, "home", staticmethod(lambda: tmp_path))
        assert default_key_file({}) == tmp_path / ".config" / "sops" / "age" / "keys.txt"


class TestResolveIdentities:
    """Tests for the lookup order of resolve_identities."""

    def test_explicit_first(self, tmp_path: Path) -> None:
        """An explicit identity beats every other source."""
        env = {"SOPS_AGE_KEY": KEY_B, "XDG_CONFIG_HOME": str(tmp_path)}
        assert resolve_identities(KEY_A, env=env) == [KEY_A]

    def test_key_file_before_env(self, tmp_path: Path) -> None:
        """A caller-supplied file beats SOPS_AGE_KEY."""
        key_file = _key_file(tmp_path / "mine.txt", KEY_A)
        env = {"SOPS_AGE_KEY": KEY_B, "XDG_CONFIG_HOME": str(tmp_path)}
        assert resolve_identities(key_file=key_file, env=env) == [KEY_A]

    def test_inline_env(self, tmp_path: Path) -> None:
        """SOPS_AGE_KEY may hold several identities."""
        env = {"SOPS_AGE_KEY": f"{KEY_A}\n{KEY_B}", "XDG_CONFIG_HOME": str(tmp_path)}
        assert resolve_identities(env=env) == [KEY_A, KEY_B]

    def test_env_key_file(self, tmp_path: Path) -> None:
        """SOPS_AGE_KEY_FILE beats the default location."""
        _key_file(tmp_path / "sops" / "age" / "keys.txt", KEY_C)
        named = _key_file(tmp_path / "named.txt", KEY_B)
        env = {"SOPS_AGE_KEY_FILE": str(named), "XDG_CONFIG_HOME": str(tmp_path)}
        assert resolve_identities(env=env) == [KEY_B]

    def test_default_location(self, tmp_path: Path) -> None:
        """The XDG keys.txt is the last resort."""
        _key_file(tmp_path / "sops" / "age" / "keys.txt", KEY_C, KEY_A)
        assert resolve_identities(env={"XDG_CONFIG_HOME": str(tmp_path)}) == [KEY_C, KEY_A]

    def test_empty_sources_are_skipped(self, tmp_path: Path) -> None:
        """Sources without keys fall through to the next one."""
        empty = _key_file(tmp_path / "empty.txt")
        _key_file(tmp_path / "sops" / "age" / "keys.txt", KEY_C)
        env = {"SOPS_AGE_KEY": "# nothing", "SOPS_AGE_KEY_FILE": str(empty), "XDG_CONFIG_HOME": str(tmp_path)}
        assert resolve_identities("not a key", key_file=tmp_path / "absent.txt", env=env) == [KEY_C]

    def test_nothing_found(self, tmp_path: Path) -> None:
        """Every searched location is reported."""
        with pytest.raises(IdentityNotFoundError) as exc_info:
            resolve_identities(env={"XDG_CONFIG_HOME": str(tmp_path)})
        assert "SOPS_AGE_KEY" in exc_info.value.searched
        assert str(tmp_path / "sops" / "age" / "keys.txt") in exc_info.value.searched
