"""004: create todos table

Revision ID: 004
Revises: 003
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE todos (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         BIGINT          NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            text            VARCHAR(200)    NOT NULL,
            completed       BOOLEAN         NOT NULL DEFAULT FALSE,
            completed_at    TIMESTAMPTZ,
            priority        VARCHAR(10)     NOT NULL DEFAULT 'medium',
            due_date        TIMESTAMPTZ,
            category        VARCHAR(30),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_todos_priority CHECK (priority IN ('low', 'medium', 'high')),
            CONSTRAINT ck_todos_text_len CHECK (LENGTH(text) BETWEEN 1 AND 200),
            CONSTRAINT ck_todos_completed_at CHECK (completed OR completed_at IS NULL)
        );
    """)
    # List query: owner, pending first, newest first
    op.execute("""
        CREATE INDEX idx_todos_user_listing
            ON todos (user_id, completed, created_at DESC);
    """)
    op.execute("""
        CREATE TRIGGER trg_todos_updated_at
            BEFORE UPDATE ON todos
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS todos CASCADE;")
