"""Tests for configuration loading."""

import pytest

from vigil.config import DEFAULT_API_URL, Config, load_config


@pytest.fixture(autouse=True)
def no_env_url(monkeypatch):
    monkeypatch.delenv("VIGIL_API_URL", raising=False)


class TestLoadConfig:
    def test_defaults_when_missing(self, tmp_path):
        config = load_config(tmp_path / "missing.conf")
        assert config == Config()
        assert config.api_url == DEFAULT_API_URL

    def test_reads_values(self, tmp_path):
        path = tmp_path / "vigil.conf"
        path.write_text(
            "# Vigil settings\n"
            'API_URL="https://api.example.com/followups/"  # trailing slash\n'
            "FETCH_TIMEOUT=2.5\n"
            "REFRESH_INTERVAL=30 # seconds\n"
            "INCLUDE_INACTIVE=yes\n"
        )

        config = load_config(path)

        assert config.api_url == "https://api.example.com/followups"
        assert config.fetch_timeout == 2.5
        assert config.refresh_interval == 30
        assert config.include_inactive is True

    def test_invalid_numbers_keep_defaults(self, tmp_path):
        path = tmp_path / "vigil.conf"
        path.write_text("FETCH_TIMEOUT=soon\nREFRESH_INTERVAL=often\n")

        config = load_config(path)

        assert config.fetch_timeout == 10.0
        assert config.refresh_interval == 60

    def test_ignores_junk_lines(self, tmp_path):
        path = tmp_path / "vigil.conf"
        path.write_text("not a setting\n\nUNKNOWN_KEY=1\nAPI_URL='http://x'\n")
        assert load_config(path).api_url == "http://x"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "vigil.conf"
        path.write_text("API_URL=http://file\n")
        monkeypatch.setenv("VIGIL_API_URL", "http://env/")
        assert load_config(path).api_url == "http://env"
