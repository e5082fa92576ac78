"""
Tests for environment configuration.
"""

from ..config import DrillConfig, parse_token_map
from ..api.app import build_service
from ..session.repository import InMemorySessionRepository, JsonFileSessionRepository


class TestDrillConfig:
    def test_defaults(self):
        config = DrillConfig.from_env({})

        assert config.env == "development"
        assert config.data_dir is None
        assert config.allowed_origins == ["*"]
        assert config.api_tokens == {}
        assert config.feedback_delay == 2.0
        assert config.sync_interval == 2.0
        assert not config.is_production

    def test_from_environment(self):
        config = DrillConfig.from_env({
            "DRILL_ENV": "production",
            "DRILL_DATA_DIR": "/var/lib/drill",
            "ALLOWED_ORIGINS": "https://a.example, https://b.example",
            "DRILL_API_TOKENS": "t1:alice,t2:bob",
            "DRILL_FEEDBACK_DELAY": "0.5",
            "DRILL_LOG_LEVEL": "debug",
            "DRILL_PORT": "9000",
        })

        assert config.is_production
        assert config.data_dir == "/var/lib/drill"
        assert config.allowed_origins == ["https://a.example", "https://b.example"]
        assert config.api_tokens == {"t1": "alice", "t2": "bob"}
        assert config.feedback_delay == 0.5
        assert config.log_level == "DEBUG"
        assert config.port == 9000


class TestParseTokenMap:
    def test_skips_malformed_entries(self):
        assert parse_token_map("a:alice, bad, :x, y:, b : bob") == {"a": "alice", "b": "bob"}

    def test_empty(self):
        assert parse_token_map("") == {}


class TestBuildService:
    def test_in_memory_without_data_dir(self):
        service = build_service(DrillConfig())

        assert isinstance(service.repository, InMemorySessionRepository)

    def test_json_files_with_data_dir(self, tmp_path):
        service = build_service(DrillConfig(data_dir=str(tmp_path)))

        assert isinstance(service.repository, JsonFileSessionRepository)
        assert (tmp_path / "sessions").is_dir()
