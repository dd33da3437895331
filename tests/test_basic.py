"""Basic tests for core functionality."""

import pytest


def test_imports():
    """Test that all main modules can be imported."""
    from deepsearch.config.settings import Settings, get_settings

    settings = get_settings()
    assert settings is not None

    from deepsearch.database.schema import Base, SearchSessionModel, WebSourceModel

    assert Base is not None
    assert SearchSessionModel.__tablename__ == "search_sessions"
    assert WebSourceModel.__tablename__ == "web_sources"

    from deepsearch.pipeline import DeepSearchOrchestrator, build_dependencies

    assert DeepSearchOrchestrator is not None
    assert build_dependencies is not None


def test_settings_defaults():
    """Test default settings."""
    from deepsearch.config.settings import DEFAULT_DORK_TEMPLATES, Settings

    settings = Settings()

    assert settings.max_search_results == 50
    assert settings.max_concurrent_scrapes == 5
    assert settings.relevance_threshold == 30
    assert settings.embedding_dimension == 768
    assert len(settings.dork_templates) == len(DEFAULT_DORK_TEMPLATES) == 7
    assert "192.168.*" in settings.blocked_domain_list
    assert settings.allowed_domain_list == ["*"]
    assert settings.analysis_parse_fallback is True


def test_settings_database_url():
    from deepsearch.config.settings import Settings

    settings = Settings(postgres_user="u", postgres_password="p", postgres_host="db", postgres_port=5433, postgres_db="x")

    assert settings.database_url == "postgresql+asyncpg://u:p@db:5433/x"


def test_options_validation():
    from pydantic import ValidationError

    from deepsearch.pipeline.models import DeepSearchOptions

    options = DeepSearchOptions()
    assert options.use_advanced_search is True
    assert options.generate_embeddings is True
    assert options.max_sources is None
    assert options.save_to_database is True

    with pytest.raises(ValidationError):
        DeepSearchOptions(max_sources=0)


def test_embedding_provider_interface():
    """Providers embed one text per call; there is no batch entry point."""
    from deepsearch.config.settings import Settings
    from deepsearch.embeddings.base import EmbeddingProvider
    from deepsearch.embeddings.openai_provider import OpenAIEmbeddingProvider

    assert EmbeddingProvider.__abstractmethods__ == {"embed_text", "get_dimension"}
    assert not hasattr(OpenAIEmbeddingProvider, "embed_batch")
    assert "embedding_batch_size" not in Settings.model_fields
