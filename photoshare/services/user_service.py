"""
Photoshare Backend - User Service (Credential Store)
=====================================================

What:  Registration, identifier lookup, password verification, and login.
How:   Users live in the `users` table; passwords are hashed with bcrypt
       (salted, cost factor BCRYPT_ROUNDS). Hashing and checking run in the
       Starlette threadpool so the event loop keeps serving other requests.
Who:   Called by the /auth routes.

Uniqueness:
    register() pre-checks username and email, and the UNIQUE constraints
    catch a concurrent registration that slips between check and insert.
    Both paths raise DuplicateError.

Login failures:
    Unknown identifier and wrong password raise the same
    InvalidCredentialsError. For unknown identifiers a check against a dummy
    hash still runs so both failures take about the same time.
"""

import logging
from typing import Optional, Tuple

import bcrypt
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from photoshare.config import settings
from photoshare.exceptions import (
    DatabaseError,
    DuplicateError,
    InvalidCredentialsError,
    ValidationError,
)
from photoshare.models.user import User
from photoshare.services.token_service import TokenService, token_service

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def hash_password(plaintext: str, rounds: Optional[int] = None) -> str:
    """Return a salted bcrypt hash of `plaintext`."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")


def check_password(plaintext: str, password_hash: str) -> bool:
    """Compare via bcrypt's own check (constant time). Malformed hashes never match."""
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


class UserService:
    """
    Credential store operations.

    Responsibilities:
        - register(): create a user with a hashed password
        - find_by_identifier(): lookup by username OR email
        - verify_password(): check a plaintext against a user's hash
        - login(): verify credentials and issue a bearer token
    """

    def __init__(self, tokens: Optional[TokenService] = None):
        self.tokens = tokens or token_service
        self._dummy_hash: Optional[str] = None

    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
    ) -> User:
        """
        Create a new user.

        Raises:
            ValidationError: password longer than bcrypt's 72-byte input limit
            DuplicateError: username or email already registered
            DatabaseError: storage failure
        """
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"password must be at most {MAX_PASSWORD_BYTES} bytes",
                field="password",
            )

        try:
            result = await db.execute(
                select(User.id).where(or_(User.username == username, User.email == email))
            )
            if result.first() is not None:
                raise DuplicateError(
                    message="Username or email is already registered",
                    context={"username": username},
                )

            password_hash = await run_in_threadpool(hash_password, password)
            user = User(username=username, email=email, password_hash=password_hash)
            db.add(user)
            # Flush so a concurrent duplicate hits the UNIQUE constraint here
            await db.flush()

        except IntegrityError:
            await db.rollback()
            raise DuplicateError(
                message="Username or email is already registered",
                context={"username": username, "source": "unique_constraint"},
            )
        except SQLAlchemyError as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User registered: %s", user.id)
        return user

    async def find_by_identifier(self, db: AsyncSession, identifier: str) -> Optional[User]:
        """Return the user whose username or email equals `identifier`."""
        try:
            result = await db.execute(
                select(User).where(or_(User.username == identifier, User.email == identifier))
            )
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def get_user(self, db: AsyncSession, user_id) -> Optional[User]:
        try:
            return await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})

    async def verify_password(self, user: User, plaintext: str) -> bool:
        return await run_in_threadpool(check_password, plaintext, user.password_hash)

    async def login(
        self,
        db: AsyncSession,
        identifier: str,
        password: str,
    ) -> Tuple[str, User]:
        """
        Authenticate by username-or-email and password.

        Returns:
            (token, user)

        Raises:
            InvalidCredentialsError: unknown identifier or wrong password
        """
        user = await self.find_by_identifier(db, identifier)

        if user is None:
            await run_in_threadpool(check_password, password, self._get_dummy_hash())
            raise InvalidCredentialsError()

        if not await self.verify_password(user, password):
            logger.info("Failed login for user %s", user.id)
            raise InvalidCredentialsError()

        return self.tokens.issue(user.id), user

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("photoshare-timing-equalizer")
        return self._dummy_hash


user_service = UserService()
