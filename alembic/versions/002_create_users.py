"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id              BIGSERIAL       PRIMARY KEY,
            name            VARCHAR(50)     NOT NULL,
            email           VARCHAR(100)    NOT NULL,
            username        VARCHAR(20)     NOT NULL,
            password_hash   VARCHAR(255)    NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username        UNIQUE (username),
            CONSTRAINT uq_users_email           UNIQUE (email),
            CONSTRAINT ck_users_username_format CHECK (username ~ '^[A-Za-z0-9_]{3,20}$'),
            CONSTRAINT ck_users_email_lower     CHECK (email = LOWER(email)),
            CONSTRAINT ck_users_name_len        CHECK (LENGTH(name) >= 1)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE users IS 'Accounts: registration, login, password change';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
