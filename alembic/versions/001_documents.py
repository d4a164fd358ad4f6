"""Document store table.

Every collection (recordings, people, theatres, users) lives in one table
as JSONB bodies keyed by (collection, id).

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute("""
        CREATE TABLE documents (
            collection TEXT NOT NULL,
            id TEXT NOT NULL,
            data JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            PRIMARY KEY (collection, id)
        );
    """)

    # Full listings come back in insertion order
    op.execute("""
        CREATE INDEX idx_documents_collection_created
        ON documents (collection, created_at, id);
    """)

    # Newest-first recordings feed
    op.execute("""
        CREATE INDEX idx_documents_recordings_date_added
        ON documents ((data -> 'dateAdded') DESC, id DESC)
        WHERE collection = 'recordings';
    """)


def downgrade():
    op.execute("DROP TABLE IF EXISTS documents;")
