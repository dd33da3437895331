"""Initial schema migration

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-16 12:00:00

"""
import os
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from pgvector.sqlalchemy import Vector

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", "768"))


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    # Create search_sessions table
    op.create_table(
        'search_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('query', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('status', sa.String(length=50), server_default='pending', nullable=False),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_search_sessions_timestamp', 'search_sessions', ['timestamp'], unique=False)
    op.create_index('idx_search_sessions_status', 'search_sessions', ['status'], unique=False)

    # Create web_sources table
    op.create_table(
        'web_sources',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('session_id', sa.String(length=36), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('domain', sa.String(length=255), nullable=True),
        sa.Column('scraped_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('embedding', Vector(EMBEDDING_DIMENSION), nullable=True),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['search_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_web_sources_session_id', 'web_sources', ['session_id'], unique=False)
    op.create_index('idx_web_sources_domain', 'web_sources', ['domain'], unique=False)
    op.execute("""
        CREATE INDEX idx_web_sources_embedding ON web_sources
        USING ivfflat (embedding vector_cosine_ops)
        WITH (lists = 100);
    """)

    # Create reports table
    op.create_table(
        'reports',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('session_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=True),
        sa.Column('file_path', sa.Text(), nullable=True),
        sa.Column('format', sa.String(length=20), server_default='markdown', nullable=False),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['search_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_reports_session_id', 'reports', ['session_id'], unique=False)

    # Create embeddings_cache table
    op.create_table(
        'embeddings_cache',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('content_hash', sa.String(length=64), nullable=False),
        sa.Column('content_preview', sa.Text(), nullable=True),
        sa.Column('embedding', Vector(EMBEDDING_DIMENSION), nullable=True),
        sa.Column('model_used', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('content_hash')
    )
    op.execute("""
        CREATE INDEX idx_embeddings_cache_embedding ON embeddings_cache
        USING ivfflat (embedding vector_cosine_ops)
        WITH (lists = 100);
    """)


def downgrade() -> None:
    op.drop_index('idx_embeddings_cache_embedding', table_name='embeddings_cache')
    op.drop_table('embeddings_cache')
    op.drop_index('idx_reports_session_id', table_name='reports')
    op.drop_table('reports')
    op.drop_index('idx_web_sources_embedding', table_name='web_sources')
    op.drop_index('idx_web_sources_domain', table_name='web_sources')
    op.drop_index('idx_web_sources_session_id', table_name='web_sources')
    op.drop_table('web_sources')
    op.drop_index('idx_search_sessions_status', table_name='search_sessions')
    op.drop_index('idx_search_sessions_timestamp', table_name='search_sessions')
    op.drop_table('search_sessions')
