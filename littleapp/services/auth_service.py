"""
Little Application: Auth Service
===================================

What:  Registration, login, token issuance, and self-service account updates.
How:   Passwords are hashed with passlib; tokens are HS256 JWTs signed with
       JWT_SECRET and carrying the user id (`sub`) and role.
Who:   routes/auth.py.
"""

import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from littleapp.config import Settings
from littleapp.exceptions import AuthenticationError, ValidationError
from littleapp.models.user import User
from littleapp.schemas.user import (
    LoginRequest,
    RegisterRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
)
from littleapp.security import create_jwt, hash_password, verify_password
from littleapp.services.post_service import flush_or_raise

logger = logging.getLogger(__name__)


class AuthService:

    def issue_token(self, user: User, settings: Settings) -> str:
        return create_jwt(
            {"sub": str(user.id), "role": user.role},
            settings.jwt_secret,
            timedelta(minutes=settings.jwt_expire_minutes),
        )

    async def register(self, db: AsyncSession, data: RegisterRequest, settings: Settings) -> str:
        existing = await db.execute(select(User.id).where(User.email == data.email))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(message="Email is already registered", field="email")

        user = User(
            name=data.name,
            email=data.email,
            role=data.role,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        await flush_or_raise(db, "user")
        logger.info("User %s registered with role %s", user.id, user.role)
        return self.issue_token(user, settings)

    async def login(self, db: AsyncSession, data: LoginRequest, settings: Settings) -> str:
        result = await db.execute(select(User).where(User.email == data.email))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationError(message="Invalid credentials")
        return self.issue_token(user, settings)

    async def update_details(
        self, db: AsyncSession, user: User, data: UpdateDetailsRequest
    ) -> User:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes and changes["email"] != user.email:
            existing = await db.execute(select(User.id).where(User.email == changes["email"]))
            if existing.scalar_one_or_none() is not None:
                raise ValidationError(message="Email is already registered", field="email")

        for field, value in changes.items():
            setattr(user, field, value)
        await flush_or_raise(db, "user")
        return user

    async def update_password(
        self,
        db: AsyncSession,
        user: User,
        data: UpdatePasswordRequest,
        settings: Settings,
    ) -> str:
        """Check the current password, store the new one, and issue a fresh token."""
        if not verify_password(data.current_password, user.password_hash):
            raise AuthenticationError(message="Password is incorrect")
        user.password_hash = hash_password(data.new_password)
        await flush_or_raise(db, "user")
        logger.info("User %s changed their password", user.id)
        return self.issue_token(user, settings)


auth_service = AuthService()
