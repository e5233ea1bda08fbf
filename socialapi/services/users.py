"""
Credential service: registration, login and per-request identity resolution.
"""
import logging
from datetime import timedelta
from typing import Optional

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from socialapi.config import Settings
from socialapi.errors import InternalError, Unauthenticated, translate_integrity_error
from socialapi.models import User
from socialapi.schemas import PublicUser, Token, UserCreate
from socialapi.security import (
    build_password_context,
    create_access_token,
    decode_access_token,
    hash_password,
    parse_bearer,
    verify_password,
)
from socialapi.telemetry import LOGIN_ATTEMPTS_TOTAL, USERS_REGISTERED_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class UsersService:
    def __init__(self, sessions: async_sessionmaker[AsyncSession], settings: Settings) -> None:
        self._sessions = sessions
        self._settings = settings
        self._pwd_context = build_password_context(settings.bcrypt_rounds)

    async def register(self, data: UserCreate) -> PublicUser:
        """
        Create an account.

        Duplicate username and duplicate email are reported with the same
        message; the unique constraints in the store decide, so two
        concurrent registrations cannot both win.
        """
        with tracer.start_as_current_span("register_user"):
            user = User(
                username=data.username,
                email=data.email,
                password_hash=hash_password(self._pwd_context, data.password),
            )
            async with self._sessions() as session:
                session.add(user)
                try:
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    logger.warning("Registration rejected for %s", data.username)
                    raise translate_integrity_error(
                        exc, "users", "An error occurred while creating the user."
                    ) from exc
                except SQLAlchemyError as exc:
                    logger.error("Registration failed for %s: %s", data.username, exc)
                    raise InternalError("An error occurred while creating the user.") from exc

            USERS_REGISTERED_TOTAL.inc()
            logger.info("Created user %s (id=%s)", user.username, user.id)
            return PublicUser.model_validate(user)

    async def authenticate(self, email: str, password: str) -> Token:
        with tracer.start_as_current_span("authenticate_user"):
            async with self._sessions() as session:
                result = await session.execute(select(User).where(User.email == email))
                user = result.scalar_one_or_none()

            # Same error for unknown email and wrong password
            if user is None or not verify_password(self._pwd_context, password, user.password_hash):
                LOGIN_ATTEMPTS_TOTAL.labels(outcome="failure").inc()
                logger.warning("Failed login attempt for %s", email)
                raise Unauthenticated(INVALID_CREDENTIALS)

            token = create_access_token(
                {"sub": user.id, "email": user.email},
                secret=self._settings.jwt_secret,
                algorithm=self._settings.jwt_algorithm,
                expires_delta=timedelta(seconds=self._settings.jwt_expires_in),
            )
            LOGIN_ATTEMPTS_TOTAL.labels(outcome="success").inc()
            logger.info("User logged in: %s", user.id)
            return Token(token=token)

    async def resolve_identity(self, authorization: Optional[str]) -> Optional[PublicUser]:
        """Map an Authorization header to a user; None for any anonymous/invalid caller."""
        token = parse_bearer(authorization)
        if token is None:
            return None

        payload = decode_access_token(
            token, self._settings.jwt_secret, self._settings.jwt_algorithm
        )
        if payload is None:
            logger.debug("Rejected bearer token")
            return None

        user_id = payload.get("sub")
        if not isinstance(user_id, str):
            return None

        return await self.get_user(user_id)

    async def get_user(self, user_id: str) -> Optional[PublicUser]:
        async with self._sessions() as session:
            user = await session.get(User, user_id)
        if user is None:
            return None
        return PublicUser.model_validate(user)
