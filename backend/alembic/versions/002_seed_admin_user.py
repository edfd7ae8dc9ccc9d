"""Seed the initial admin user

Revision ID: 002
Revises: 001
Create Date: 2024-01-28 00:00:01.000000+00:00

What:  Inserts one admin account so the console can be reached after a fresh
       deploy. Email and password come from ADMIN_SEED_EMAIL and
       ADMIN_SEED_PASSWORD; the password is hashed here with the same
       Werkzeug scheme UserService verifies against.

Change the password right after the first login.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

from app.config import settings
from app.services.user_service import hash_password

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.get_bind().execute(
        sa.text(
            "INSERT INTO users (email, password_hash, name) "
            "VALUES (:email, :password_hash, 'Admin') "
            "ON CONFLICT (email) DO NOTHING"
        ),
        {
            "email": settings.admin_seed_email.strip().lower(),
            "password_hash": hash_password(settings.admin_seed_password),
        },
    )


def downgrade() -> None:
    op.get_bind().execute(
        sa.text("DELETE FROM users WHERE email = :email"),
        {"email": settings.admin_seed_email.strip().lower()},
    )
