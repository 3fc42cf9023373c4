"""
Unit tests for server configuration and the CLI mapping onto it.
"""

from pathlib import Path

import pytest

from tinyhttpd.config import ServerConfig
from tinyhttpd.__main__ import build_parser, config_from_args


ENV_VARS = (
    "HTTP_HOST",
    "HTTP_PORT",
    "HTTP_DOCUMENT_ROOT",
    "HTTP_INDEX_FILE",
    "HTTP_MAX_REQUEST_SIZE",
    "HTTP_TIMEOUT",
    "HTTP_WRITE_TIMEOUT",
    "HTTP_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestServerConfig:
    """Tests for ServerConfig defaults and validation."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.port == 8080
        assert config.max_request_size == 4096
        assert config.index_file == "index.html"
        assert config.include_content_length is False
        assert config.serves_files is False
        config.validate()

    def test_from_env(self, clean_env, tmp_path: Path):
        """Test that HTTP_* variables are read."""
        clean_env.setenv("HTTP_PORT", "3000")
        clean_env.setenv("HTTP_DOCUMENT_ROOT", str(tmp_path))
        clean_env.setenv("HTTP_MAX_REQUEST_SIZE", "8192")
        clean_env.setenv("HTTP_TIMEOUT", "2.5")
        clean_env.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.port == 3000
        assert config.document_root == str(tmp_path)
        assert config.serves_files is True
        assert config.max_request_size == 8192
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"
        config.validate()

    def test_from_env_defaults(self, clean_env):
        assert ServerConfig.from_env() == ServerConfig()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 70000},
        {"max_request_size": 8},
        {"chunk_size": 0},
        {"timeout": 0},
        {"write_timeout": -1.0},
        {"index_file": ""},
        {"index_file": "../index.html"},
        {"log_level": "LOUD"},
    ])
    def test_invalid_values(self, overrides):
        """Test that bad values fail validation."""
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_document_root_must_exist(self, tmp_path: Path):
        with pytest.raises(ValueError, match="not a directory"):
            ServerConfig(document_root=str(tmp_path / "nope")).validate()

    def test_timeouts_may_be_disabled(self):
        ServerConfig(timeout=None, write_timeout=None).validate()


class TestCommandLine:
    """Tests for turning CLI arguments into a ServerConfig."""

    def test_no_arguments_uses_env(self, clean_env):
        clean_env.setenv("HTTP_PORT", "9999")

        config = config_from_args(build_parser().parse_args([]))

        assert config.port == 9999
        assert config.document_root is None

    def test_arguments_override_env(self, clean_env, tmp_path: Path):
        clean_env.setenv("HTTP_PORT", "9999")

        args = build_parser().parse_args([
            "--port", "3000",
            "--host", "0.0.0.0",
            "--root", str(tmp_path),
            "--index", "home.html",
            "--max-request-size", "1024",
            "--timeout", "5",
            "--log-level", "DEBUG",
            "--content-length",
        ])
        config = config_from_args(args)

        assert config.port == 3000
        assert config.host == "0.0.0.0"
        assert config.document_root == str(tmp_path)
        assert config.index_file == "home.html"
        assert config.max_request_size == 1024
        assert config.timeout == 5.0
        assert config.log_level == "DEBUG"
        assert config.include_content_length is True

    def test_invalid_log_level_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "LOUD"])
