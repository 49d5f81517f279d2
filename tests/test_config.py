"""
Tests for configuration loading — unwind.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from unwind.core.config.loader import ConfigError, find_settings_file, load_settings
from unwind.core.models.settings import DEFAULT_STORE_ROOT, PROFILE_TARGETS


@pytest.fixture
def valid_settings_yml(tmp_path: Path) -> Path:
    """Create a valid unwind.yml in a temp directory."""
    content = textwrap.dedent("""\
        store_root: /opt/nix/store
        channels:
          - nixpkgs=https://nixos.org/channels/nixpkgs-unstable
        profile_targets:
          - /etc/bashrc
          - /etc/zshrc
        receipt_path: /var/lib/unwind/receipt.json
    """)
    path = tmp_path / "unwind.yml"
    path.write_text(content)
    return path


class TestLoadSettings:
    def test_load_valid(self, valid_settings_yml: Path):
        settings = load_settings(valid_settings_yml)
        assert settings.store_root == "/opt/nix/store"
        assert settings.channels == ["nixpkgs=https://nixos.org/channels/nixpkgs-unstable"]
        assert settings.profile_targets == ["/etc/bashrc", "/etc/zshrc"]
        assert settings.receipt_path == "/var/lib/unwind/receipt.json"

    def test_unset_fields_keep_defaults(self, tmp_path: Path):
        path = tmp_path / "unwind.yml"
        path.write_text("channels: []\n")
        settings = load_settings(path)
        assert settings.store_root == DEFAULT_STORE_ROOT
        assert settings.profile_targets == PROFILE_TARGETS

    def test_empty_file_is_defaults(self, tmp_path: Path):
        path = tmp_path / "unwind.yml"
        path.write_text("")
        assert load_settings(path).store_root == DEFAULT_STORE_ROOT

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "unwind.yml"
        path.write_text("store_root: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "unwind.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)

    def test_wrong_field_type(self, tmp_path: Path):
        path = tmp_path / "unwind.yml"
        path.write_text("channels: 5\n")
        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(path)

    def test_autodetect_from_cwd(self, valid_settings_yml: Path, monkeypatch):
        nested = valid_settings_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert load_settings().store_root == "/opt/nix/store"


class TestFindSettingsFile:
    def test_find_in_current_dir(self, valid_settings_yml: Path):
        assert find_settings_file(valid_settings_yml.parent) == valid_settings_yml

    def test_find_walks_up(self, valid_settings_yml: Path):
        nested = valid_settings_yml.parent / "deep" / "nested"
        nested.mkdir(parents=True)
        assert find_settings_file(nested) == valid_settings_yml

    def test_not_found(self, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        found = find_settings_file(empty)
        assert found is None or not found.is_relative_to(tmp_path)
