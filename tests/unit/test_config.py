"""
Unit tests for ServerConfig.
"""

import pytest

from minihttpd.config import ServerConfig


class TestDefaults:
    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 4221
        assert config.buffer_size == 1024
        assert config.directory is None
        assert config.read_timeout is None
        assert config.max_header_size is None
        assert config.log_level == "INFO"

    def test_defaults_are_valid(self):
        ServerConfig().validate()


class TestValidate:
    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 0},
        {"read_timeout": 0},
        {"read_timeout": -1.5},
        {"max_header_size": 0},
        {"log_level": "LOUD"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    @pytest.mark.parametrize("port", [0, 1, 4221, 65535])
    def test_valid_ports(self, port: int):
        ServerConfig(port=port).validate()

    def test_log_level_case_insensitive(self):
        ServerConfig(log_level="debug").validate()

    def test_missing_directory_only_warns(self, tmp_path, caplog):
        missing = tmp_path / "missing"

        with caplog.at_level("WARNING", logger="minihttpd"):
            ServerConfig(directory=str(missing)).validate()

        assert "does not exist" in caplog.text


class TestFromEnv:
    def test_defaults_without_env(self, monkeypatch):
        for name in ("HOST", "PORT", "DIRECTORY", "READ_TIMEOUT", "MAX_HEADER_SIZE", "LOG_LEVEL"):
            monkeypatch.delenv(f"MINIHTTPD_{name}", raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    def test_reads_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MINIHTTPD_HOST", "0.0.0.0")
        monkeypatch.setenv("MINIHTTPD_PORT", "8080")
        monkeypatch.setenv("MINIHTTPD_DIRECTORY", str(tmp_path))
        monkeypatch.setenv("MINIHTTPD_READ_TIMEOUT", "2.5")
        monkeypatch.setenv("MINIHTTPD_MAX_HEADER_SIZE", "8192")
        monkeypatch.setenv("MINIHTTPD_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.directory == str(tmp_path)
        assert config.read_timeout == 2.5
        assert config.max_header_size == 8192
        assert config.log_level == "DEBUG"

    def test_empty_directory_means_disabled(self, monkeypatch):
        monkeypatch.setenv("MINIHTTPD_DIRECTORY", "")
        assert ServerConfig.from_env().directory is None

    def test_bad_port(self, monkeypatch):
        monkeypatch.setenv("MINIHTTPD_PORT", "http")
        with pytest.raises(ValueError):
            ServerConfig.from_env()
