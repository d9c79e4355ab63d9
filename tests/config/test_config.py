"""
Tests for configuration management.

Tests config loading from:
1. Environment variables
2. YAML files
3. Combined (env overrides YAML)
"""

import os

import pytest
import yaml

from src.config import Config, LLMConfig, ProcessingConfig


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch, tmp_path):
    """Keep CMS_ variables and .env loading from leaking between tests."""
    environ = {k: v for k, v in os.environ.items() if not k.startswith("CMS_")}
    monkeypatch.setattr(os, "environ", environ)
    monkeypatch.chdir(tmp_path)


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        """Test creating config with defaults."""
        config = Config()

        # Language model defaults
        assert config.llm.provider == "ollama"
        assert config.llm.model == "llama3"
        assert config.llm.base_url is None
        assert config.llm.api_key is None
        assert config.llm.retry_attempts == 3

        # Embedder defaults
        assert config.embedder.model == "mxbai-embed-large"
        assert config.embedder.dimension == 1024

        # Processing defaults
        assert config.processing.chunk_size == 1000
        assert config.processing.chunk_overlap == 200
        assert config.processing.max_concurrent_documents == 5
        assert config.processing.summary_max_length == 500
        assert config.processing.context_summary_max_length == 1000

        # Features
        assert config.features.relationship_extraction is True
        assert config.features.contextual_summarization is True

        # Stores
        assert config.neo4j.uri == "bolt://localhost:7687"
        assert config.neo4j.password == "contextmemory"
        assert config.qdrant.url == "http://localhost:6333"
        assert config.qdrant.collection_name == "documents"
        assert config.repository.backend == "memory"

    def test_llm_config_creation(self):
        """Test creating LLM config."""
        llm_config = LLMConfig(provider="openai", model="gpt-4o", api_key="sk-test")

        assert llm_config.provider == "openai"
        assert llm_config.api_key == "sk-test"
        assert llm_config.temperature == 0.7


class TestConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env_defaults(self):
        """Test environment without CMS_ variables gives defaults."""
        assert Config.from_env() == Config()

    def test_from_env_basic(self, monkeypatch):
        """Test loading basic config from environment."""
        monkeypatch.setenv("CMS_LLM_PROVIDER", "openai")
        monkeypatch.setenv("CMS_LLM_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("CMS_LLM_API_KEY", "sk-test-key")
        monkeypatch.setenv("CMS_EMBEDDER_MODEL", "text-embedding-3-small")

        config = Config.from_env()

        assert config.llm.provider == "openai"
        assert config.llm.model == "gpt-4o-mini"
        assert config.llm.api_key == "sk-test-key"
        assert config.embedder.model == "text-embedding-3-small"

    def test_from_env_with_numbers(self, monkeypatch):
        """Test loading numeric values from environment."""
        monkeypatch.setenv("CMS_LLM_TEMPERATURE", "0.1")
        monkeypatch.setenv("CMS_EMBEDDER_DIMENSION", "1536")
        monkeypatch.setenv("CMS_CHUNK_SIZE", "500")
        monkeypatch.setenv("CMS_CHUNK_OVERLAP", "50")
        monkeypatch.setenv("CMS_MAX_CONCURRENT_DOCUMENTS", "8")

        config = Config.from_env()

        assert config.llm.temperature == 0.1
        assert config.embedder.dimension == 1536
        assert config.processing.chunk_size == 500
        assert config.processing.chunk_overlap == 50
        assert config.processing.max_concurrent_documents == 8

    def test_from_env_with_booleans(self, monkeypatch):
        """Test loading boolean values from environment."""
        monkeypatch.setenv("CMS_FEATURE_RELATIONSHIP_EXTRACTION", "false")
        monkeypatch.setenv("CMS_FEATURE_CONTEXTUAL_SUMMARIZATION", "0")
        monkeypatch.setenv("CMS_QDRANT_USE_GRPC", "yes")

        config = Config.from_env()

        assert config.features.relationship_extraction is False
        assert config.features.contextual_summarization is False
        assert config.qdrant.use_grpc is True

    def test_from_env_stores(self, monkeypatch):
        """Test store configuration from environment."""
        monkeypatch.setenv("CMS_NEO4J_PASSWORD", "secret")
        monkeypatch.setenv("CMS_QDRANT_URL", "https://qdrant.example.com:6333")
        monkeypatch.setenv("CMS_QDRANT_COLLECTION", "test_documents")
        monkeypatch.setenv("CMS_REPOSITORY_BACKEND", "sqlite")
        monkeypatch.setenv("CMS_REPOSITORY_SQLITE_PATH", "data/docs.db")

        config = Config.from_env()

        assert config.neo4j.password == "secret"
        assert config.qdrant.url == "https://qdrant.example.com:6333"
        assert config.qdrant.collection_name == "test_documents"
        assert config.repository.backend == "sqlite"
        assert config.repository.sqlite_path == "data/docs.db"

    def test_empty_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("CMS_CHUNK_SIZE", "")

        assert Config.from_env().processing.chunk_size == 1000

    def test_from_env_with_dotenv_file(self, tmp_path):
        """Test loading from .env file."""
        env_file = tmp_path / ".env.test"
        env_file.write_text("CMS_LLM_MODEL=mistral\nCMS_LOG_LEVEL=DEBUG\n")

        config = Config.from_env(env_file=env_file)

        assert config.llm.model == "mistral"
        assert config.logging.level == "DEBUG"

    def test_environment_wins_over_dotenv(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env.test"
        env_file.write_text("CMS_LLM_MODEL=from-file\n")
        monkeypatch.setenv("CMS_LLM_MODEL", "from-env")

        assert Config.from_env(env_file=env_file).llm.model == "from-env"


class TestConfigFromYaml:
    """Test loading configuration from YAML."""

    def test_from_yaml(self, tmp_path):
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.dump(
                {
                    "llm": {"provider": "openai", "model": "gpt-4o", "api_key": "sk-yaml"},
                    "processing": {"chunk_size": 300, "chunk_overlap": 30},
                    "repository": {"backend": "sqlite"},
                }
            )
        )

        config = Config.from_yaml(yaml_file)

        assert config.llm.model == "gpt-4o"
        assert config.processing == ProcessingConfig(chunk_size=300, chunk_overlap=30)
        assert config.repository.backend == "sqlite"
        assert config.qdrant.collection_name == "documents"

    def test_from_yaml_empty_file(self, tmp_path):
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert Config.from_yaml(yaml_file) == Config()

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "missing.yaml")


class TestConfigFromEnvOrYaml:
    """Test combined loading."""

    def test_env_section_overrides_yaml(self, monkeypatch, tmp_path):
        """Test sections changed by the environment replace the YAML section."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.dump(
                {
                    "llm": {"model": "from-yaml"},
                    "qdrant": {"collection_name": "yaml_documents"},
                }
            )
        )
        monkeypatch.setenv("CMS_LLM_MODEL", "from-env")

        config = Config.from_env_or_yaml(yaml_path=yaml_file)

        assert config.llm.model == "from-env"
        assert config.qdrant.collection_name == "yaml_documents"

    def test_without_yaml(self, monkeypatch):
        monkeypatch.setenv("CMS_CHUNK_SIZE", "256")

        config = Config.from_env_or_yaml(yaml_path=None)

        assert config.processing.chunk_size == 256
