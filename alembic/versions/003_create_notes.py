"""003: create notes table

Revision ID: 003
Revises: 002
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notes (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         BIGINT          NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            title           VARCHAR(100)    NOT NULL,
            text            TEXT            NOT NULL,
            tags            TEXT[]          NOT NULL DEFAULT '{}',
            is_pinned       BOOLEAN         NOT NULL DEFAULT FALSE,
            is_archived     BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notes_title_len CHECK (LENGTH(title) BETWEEN 1 AND 100),
            CONSTRAINT ck_notes_text_len  CHECK (LENGTH(text) BETWEEN 1 AND 5000)
        );
    """)
    # List query: owner + archived filter, pinned first, newest first
    op.execute("""
        CREATE INDEX idx_notes_user_listing
            ON notes (user_id, is_archived, is_pinned DESC, created_at DESC);
    """)
    op.execute("""
        CREATE TRIGGER trg_notes_updated_at
            BEFORE UPDATE ON notes
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notes CASCADE;")
