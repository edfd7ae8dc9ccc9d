"""
East Village Everything — User Service
========================================

What:  Admin accounts: lookup, creation, profile/password changes and
       credential checks for the login route.
How:   Emails are lowercased before every read and write. Passwords are
       hashed with Werkzeug's generate_password_hash and verified with
       check_password_hash; the hash never leaves this module.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from app.exceptions import ValidationError
from app.models.user import User
from app.schemas.user import UserCreate, UserResponse, UserUpdate
from app.services.update_builder import plan_update

logger = logging.getLogger(__name__)

USER_UPDATE_FIELDS = ("email", "name")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


class UserService:

    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """Full row including password_hash; internal use only."""
        result = await db.execute(
            select(User)
            .where(User.email == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get(self, db: AsyncSession, user_id: UUID) -> Optional[UserResponse]:
        result = await db.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        return UserResponse.model_validate(user) if user else None

    async def list(self, db: AsyncSession) -> List[UserResponse]:
        result = await db.execute(select(User).order_by(User.name.asc()))
        return [UserResponse.model_validate(user) for user in result.scalars().all()]

    async def create(self, db: AsyncSession, data: UserCreate) -> UserResponse:
        """
        Raises:
            ValidationError: the email is already registered
        """
        if await self.find_by_email(db, data.email):
            raise ValidationError(
                message="A user with this email already exists", field="email"
            )
        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            name=data.name,
        )
        db.add(user)
        await db.flush()
        logger.info("User created: %s", user.email)
        return UserResponse.model_validate(user)

    async def update(
        self,
        db: AsyncSession,
        user_id: UUID,
        patch: UserUpdate,
    ) -> Optional[UserResponse]:
        plan = plan_update(patch, USER_UPDATE_FIELDS)
        if not plan.has_changes:
            return await self.get(db, user_id)

        if "email" in plan:
            existing = await self.find_by_email(db, plan.get("email"))
            if existing and existing.id != user_id:
                raise ValidationError(
                    message="A user with this email already exists", field="email"
                )

        result = await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(**plan.values())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self.get(db, user_id)

    async def update_password(self, db: AsyncSession, user_id: UUID, password: str) -> bool:
        result = await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                password_hash=hash_password(password),
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0

    async def delete(self, db: AsyncSession, user_id: UUID) -> bool:
        result = await db.execute(
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) > 0

    async def authenticate(
        self,
        db: AsyncSession,
        email: str,
        password: str,
    ) -> Optional[UserResponse]:
        """The user for valid credentials, None otherwise (unknown email or bad password)."""
        user = await self.find_by_email(db, email)
        if user is None or not verify_password(user.password_hash, password):
            logger.warning("Failed login attempt for %s", email.strip().lower())
            return None
        return UserResponse.model_validate(user)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
