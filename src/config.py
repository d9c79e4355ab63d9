"""
Configuration for the Context Memory Store.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """Language model provider configuration (chat, summaries, extraction)."""

    provider: str = "ollama"  # ollama, openai
    model: str = "llama3"
    base_url: str | None = None  # provider default when unset
    api_key: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2048
    timeout: float = 120.0
    retry_attempts: int = 3
    retry_delay: float = 0.5


class EmbedderConfig(BaseModel):
    """Embedding model configuration."""

    model: str = "mxbai-embed-large"
    dimension: int = 1024


class ProcessingConfig(BaseModel):
    """Document processing configuration."""

    chunk_size: int = 1000
    chunk_overlap: int = 200
    max_concurrent_documents: int = 5
    max_file_size_mb: int = 50
    summary_max_length: int = 500
    context_summary_max_length: int = 1000


class FeaturesConfig(BaseModel):
    """Feature flags for optional enrichment steps."""

    relationship_extraction: bool = True
    contextual_summarization: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class QdrantConfig(BaseModel):
    """Qdrant vector store configuration."""

    url: str = "http://localhost:6333"
    api_key: str | None = None
    collection_name: str = "documents"
    distance: str = "Cosine"
    use_grpc: bool = False
    timeout: int = 30


class Neo4jConfig(BaseModel):
    """Neo4j graph database configuration."""

    uri: str = "bolt://localhost:7687"
    username: str = "neo4j"
    password: str = "contextmemory"
    database: str = "neo4j"


class RepositoryConfig(BaseModel):
    """Document repository configuration."""

    backend: str = "memory"  # memory, sqlite
    sqlite_path: str = "context_memory.db"


class Config(BaseModel):
    """Main configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    embedder: EmbedderConfig = Field(default_factory=EmbedderConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    qdrant: QdrantConfig = Field(default_factory=QdrantConfig)
    neo4j: Neo4jConfig = Field(default_factory=Neo4jConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            CMS_LLM_PROVIDER: Language model provider (ollama, openai)
            CMS_LLM_MODEL: Chat model name
            CMS_LLM_BASE_URL: Provider base URL
            CMS_LLM_API_KEY: API key (for OpenAI)
            CMS_LLM_RETRY_ATTEMPTS: Retry attempts for provider calls
            CMS_EMBEDDER_MODEL: Embedding model name
            CMS_EMBEDDER_DIMENSION: Embedding dimension
            CMS_CHUNK_SIZE: Default chunk size in words
            CMS_CHUNK_OVERLAP: Default chunk overlap in words
            CMS_MAX_CONCURRENT_DOCUMENTS: Batch ingestion concurrency bound
            CMS_FEATURE_RELATIONSHIP_EXTRACTION: Enable relationship extraction
            CMS_FEATURE_CONTEXTUAL_SUMMARIZATION: Enable summaries
            CMS_NEO4J_URI: Neo4j URI
            CMS_NEO4J_USERNAME: Neo4j username
            CMS_NEO4J_PASSWORD: Neo4j password
            CMS_QDRANT_URL: Qdrant URL
            CMS_QDRANT_COLLECTION: Qdrant collection name
            CMS_REPOSITORY_BACKEND: Document repository backend (memory, sqlite)
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None or value == "":
                return default
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            llm=LLMConfig(
                provider=get_env("CMS_LLM_PROVIDER", "ollama"),
                model=get_env("CMS_LLM_MODEL", "llama3"),
                base_url=get_env("CMS_LLM_BASE_URL"),
                api_key=get_env("CMS_LLM_API_KEY"),
                temperature=get_env("CMS_LLM_TEMPERATURE", 0.7),
                max_tokens=get_env("CMS_LLM_MAX_TOKENS", 2048),
                timeout=get_env("CMS_LLM_TIMEOUT", 120.0),
                retry_attempts=get_env("CMS_LLM_RETRY_ATTEMPTS", 3),
                retry_delay=get_env("CMS_LLM_RETRY_DELAY", 0.5),
            ),
            embedder=EmbedderConfig(
                model=get_env("CMS_EMBEDDER_MODEL", "mxbai-embed-large"),
                dimension=get_env("CMS_EMBEDDER_DIMENSION", 1024),
            ),
            processing=ProcessingConfig(
                chunk_size=get_env("CMS_CHUNK_SIZE", 1000),
                chunk_overlap=get_env("CMS_CHUNK_OVERLAP", 200),
                max_concurrent_documents=get_env("CMS_MAX_CONCURRENT_DOCUMENTS", 5),
                max_file_size_mb=get_env("CMS_MAX_FILE_SIZE_MB", 50),
            ),
            features=FeaturesConfig(
                relationship_extraction=get_env("CMS_FEATURE_RELATIONSHIP_EXTRACTION", True),
                contextual_summarization=get_env("CMS_FEATURE_CONTEXTUAL_SUMMARIZATION", True),
            ),
            neo4j=Neo4jConfig(
                uri=get_env("CMS_NEO4J_URI", "bolt://localhost:7687"),
                username=get_env("CMS_NEO4J_USERNAME", "neo4j"),
                password=get_env("CMS_NEO4J_PASSWORD", "contextmemory"),
                database=get_env("CMS_NEO4J_DATABASE", "neo4j"),
            ),
            qdrant=QdrantConfig(
                url=get_env("CMS_QDRANT_URL", "http://localhost:6333"),
                api_key=get_env("CMS_QDRANT_API_KEY"),
                collection_name=get_env("CMS_QDRANT_COLLECTION", "documents"),
                distance=get_env("CMS_QDRANT_DISTANCE", "Cosine"),
                use_grpc=get_env("CMS_QDRANT_USE_GRPC", False),
                timeout=get_env("CMS_QDRANT_TIMEOUT", 30),
            ),
            repository=RepositoryConfig(
                backend=get_env("CMS_REPOSITORY_BACKEND", "memory"),
                sqlite_path=get_env("CMS_REPOSITORY_SQLITE_PATH", "context_memory.db"),
            ),
            logging=LoggingConfig(
                level=get_env("CMS_LOG_LEVEL", "INFO"),
                log_to_file=get_env("CMS_LOG_TO_FILE", True),
                log_dir=get_env("CMS_LOG_DIR", "logs"),
                file_rotation=get_env("CMS_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("CMS_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("CMS_LOG_COMPRESSION", "zip"),
                serialize=get_env("CMS_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)
        default = cls()

        # Env sections that differ from defaults override YAML sections
        final_dict = {**config_dict}
        for section in (
            "llm",
            "embedder",
            "processing",
            "features",
            "qdrant",
            "neo4j",
            "repository",
            "logging",
        ):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
