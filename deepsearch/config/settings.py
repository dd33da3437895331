"""Application settings with environment variable support."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DORK_TEMPLATES = (
    '"{term}"',
    "{term} filetype:pdf",
    "{term} site:wikipedia.org",
    "{term} site:edu",
    "{term} site:org",
    "{term} inurl:blog",
    '{term} intitle:"{term}"',
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Log level")

    # Database Settings
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_port: int = Field(default=5432, description="PostgreSQL port")
    postgres_db: str = Field(default="deepsearch", description="PostgreSQL database")
    postgres_user: str = Field(default="deepsearch_user", description="PostgreSQL user")
    postgres_password: str = Field(default="deepsearch_pass", description="PostgreSQL password")
    database_pool_size: int = Field(default=10, description="Database connection pool size")

    @property
    def database_url(self) -> str:
        """Construct database URL."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sync_database_url(self) -> str:
        """Construct sync database URL for Alembic."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # LLM Settings
    llm_mode: Literal["live", "mock"] = Field(default="live", description="LLM mode: live or mock")
    llm_model: str = Field(default="ollama:llama3.1:8b", description="Chat model as provider:model")
    llm_timeout: float = Field(default=120.0, description="Timeout per model call in seconds")
    ollama_base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_base_url: Optional[str] = Field(default=None, description="OpenAI-compatible API base URL")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")

    search_terms_max_tokens: int = Field(default=1000, description="Max tokens for term expansion")
    analysis_max_tokens: int = Field(default=2000, description="Max tokens for source analysis")
    report_max_tokens: int = Field(default=6000, description="Max tokens for the final report")
    analysis_parse_fallback: bool = Field(
        default=True,
        description="Use a neutral analysis when a source analysis response cannot be decoded",
    )

    # Embedding Settings
    embedding_provider: Literal["ollama", "openai", "mock"] = Field(
        default="ollama", description="Embedding provider"
    )
    ollama_embedding_model: str = Field(default="nomic-embed-text", description="Ollama embedding model")
    openai_embedding_model: str = Field(default="text-embedding-3-small", description="OpenAI embedding model")
    embedding_dimension: int = Field(default=768, description="Embedding vector dimension")

    # Search Settings
    search_timeout: float = Field(default=30.0, description="Timeout per search/scrape request in seconds")
    max_search_results: int = Field(default=50, description="Result budget for one deep search")
    max_concurrent_scrapes: int = Field(default=5, description="Pages fetched concurrently per chunk")
    user_agent: str = Field(default="DeepSearch Bot 1.0", description="User agent for outbound requests")
    duckduckgo_region: str = Field(default="br-pt", description="DuckDuckGo region (kl)")
    duckduckgo_safe_search: Literal["strict", "moderate", "off"] = Field(
        default="moderate", description="DuckDuckGo safe search level"
    )
    search_term_delay: float = Field(default=1.0, description="Delay between term searches in seconds")
    dork_delay: float = Field(default=2.0, description="Delay between dork searches in seconds")
    scrape_chunk_delay: float = Field(default=0.5, description="Delay between scrape chunks in seconds")
    dork_templates: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DORK_TEMPLATES),
        description="Query refinement templates, {term} is replaced by the base term",
    )

    # Security
    allowed_domains: str = Field(default="*", description="Allowed domains (comma-separated)")
    blocked_domains: str = Field(
        default="localhost,127.0.0.1,10.*,192.168.*,172.16.*",
        description="Blocked domains (comma-separated, * allowed)",
    )

    # Performance
    max_content_length: int = Field(default=50000, description="Max chars kept per scraped page")
    parallel_processing_limit: int = Field(default=5, description="Sources analyzed concurrently per batch")
    analysis_batch_delay: float = Field(default=1.0, description="Delay between analysis batches in seconds")
    relevance_threshold: int = Field(default=30, description="Relevance above which embeddings are generated")
    embedding_max_chars: int = Field(default=8000, description="Max chars of text submitted for embedding")
    max_vector_search_results: int = Field(default=10, description="Default vector search limit")

    # Reports
    reports_dir: str = Field(default="./reports", description="Directory for saved reports")
    reports_auto_save: bool = Field(default=False, description="Write reports to reports_dir")

    @property
    def allowed_domain_list(self) -> list[str]:
        return _split_list(self.allowed_domains)

    @property
    def blocked_domain_list(self) -> list[str]:
        return _split_list(self.blocked_domains)


def _split_list(raw: str) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
