"""
Tests for loading the JSON configuration.
"""
import json

import pytest

from docstore.config import Settings, load_settings, parse_duration
from docstore.errors import ConfigError

SAMPLE = {
    "security": {
        "jwtIssuer": "login.example.com",
        "jwtSecret": "secret",
        "cookieName": "login_token",
        "loginRedirect": "https://example.com/login",
        "claim": {"name": "mydms", "url": "https://example.com", "roles": ["User", "Admin"]},
        "cacheDuration": "10m",
    },
    "database": {"connectionString": "sqlite:///./test.db"},
    "logging": {"filePath": "./logs/docstore.log", "logLevel": "debug"},
    "fileServer": {"path": "./ui", "urlPath": "/ui"},
    "upload": {"allowedFileTypes": ["pdf"], "maxUploadSize": 500000, "uploadPath": "./uploads"},
    "filestore": {"region": "eu-central-1", "bucket": "docs", "key": "k", "secret": "s"},
}


def _write(tmp_path, content):
    path = tmp_path / "application.json"
    path.write_text(content if isinstance(content, str) else json.dumps(content))
    return path


class TestLoadSettings:
    def test_camel_case_file(self, tmp_path):
        settings = load_settings(_write(tmp_path, SAMPLE))
        assert settings.security.jwt_issuer == "login.example.com"
        assert settings.security.claim.roles == ["User", "Admin"]
        assert settings.security.cache_seconds == 600
        assert settings.database.connection_string == "sqlite:///./test.db"
        assert settings.logging.log_level == "debug"
        assert settings.file_server.path == "./ui"
        assert settings.upload.max_upload_size == 500000
        assert settings.filestore.bucket == "docs"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(_write(tmp_path, "{not json"))

    def test_invalid_value(self, tmp_path):
        bad = dict(SAMPLE, upload={"maxUploadSize": "lots"})
        with pytest.raises(ConfigError):
            load_settings(_write(tmp_path, bad))

    def test_invalid_duration(self, tmp_path):
        bad = dict(SAMPLE, security=dict(SAMPLE["security"], cacheDuration="soon"))
        with pytest.raises(ConfigError):
            load_settings(_write(tmp_path, bad))

    def test_environment_fills_gaps(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCSTORE_SECURITY__JWT_SECRET", "from-env")
        settings = load_settings(_write(tmp_path, {"database": {"connectionString": "sqlite://"}}))
        assert settings.security.jwt_secret == "from-env"
        assert settings.database.connection_string == "sqlite://"


def test_defaults():
    settings = Settings()
    assert settings.upload.allowed_file_types == ["pdf", "png", "jpg", "jpeg"]
    assert settings.app.request_timeout_seconds == 30.0


@pytest.mark.parametrize("value,seconds", [("30s", 30), ("10m", 600), ("1h", 3600), ("15", 15)])
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds
