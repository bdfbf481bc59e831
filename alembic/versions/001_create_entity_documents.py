"""001: create entity_documents table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE entity_documents (
            collection      VARCHAR(64)     NOT NULL,
            sport           VARCHAR(64)     NOT NULL,
            id              VARCHAR(128)    NOT NULL,
            body            JSONB           NOT NULL DEFAULT '{}',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_entity_documents PRIMARY KEY (collection, sport, id),
            CONSTRAINT ck_entity_documents_collection
                CHECK (collection IN ('teams', 'players', 'auction_history'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_entity_documents_updated_at
            BEFORE UPDATE ON entity_documents
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE entity_documents IS "
        "'Per-sport teams, players and auction history stored as JSONB documents';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS entity_documents CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
