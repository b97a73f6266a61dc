"""
Password store, login and token issuance.
"""

from enum import Enum
from typing import Any, Optional

import asyncpg
import bcrypt
from itsdangerous import BadSignature, URLSafeTimedSerializer

from streaming_catalog.db.postgres import get_user_by_email, insert_user
from streaming_catalog.logger import logger
from streaming_catalog.models import User

HASH_ROUNDS = 12
BCRYPT_MAX_BYTES = 72
TOKEN_MAX_AGE_SECONDS = 7 * 24 * 60 * 60
TOKEN_SALT = "streaming-catalog-auth"


class CredentialErrorKind(str, Enum):
    AUTH_FAILURE = "auth_failure"
    CONFLICT = "conflict"


class CredentialError(Exception):
    def __init__(self, kind: CredentialErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


def hash_password(password: str, rounds: int = HASH_ROUNDS) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds)).decode("ascii")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("ascii"))
    except ValueError:
        # not a bcrypt hash
        return False


def _password_bytes(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class CredentialStore:
    def __init__(
        self,
        pool: Optional[asyncpg.Pool],
        secret: str,
        token_max_age: int = TOKEN_MAX_AGE_SECONDS,
        hash_rounds: int = HASH_ROUNDS,
    ):
        self.pool = pool
        self.token_max_age = token_max_age
        self.hash_rounds = hash_rounds
        self._serializer = URLSafeTimedSerializer(secret, salt=TOKEN_SALT)

    async def create_account(self, email: str, password: str, name: str) -> User:
        password_hash = hash_password(password, rounds=self.hash_rounds)
        try:
            user = await insert_user(self.pool, email, name, password_hash)
        except asyncpg.UniqueViolationError:
            logger.info(f"user {email} already exists")
            raise CredentialError(
                CredentialErrorKind.CONFLICT, "User with this email already exists"
            ) from None
        logger.info(f"created user {user.user_id} for {email}")
        return user

    async def verify_credentials(self, email: str, password: str) -> User:
        stored = await get_user_by_email(self.pool, email)
        if stored is None or not check_password(password, stored.password_hash):
            logger.info(f"invalid credentials for {email}")
            raise CredentialError(CredentialErrorKind.AUTH_FAILURE, "Invalid email or password")
        return stored.user

    def issue_token(self, user: User) -> str:
        return self._serializer.dumps(user.to_dict())

    def verify_token(self, token: str) -> dict[str, Any]:
        try:
            return self._serializer.loads(token, max_age=self.token_max_age)
        except BadSignature:
            raise CredentialError(CredentialErrorKind.AUTH_FAILURE, "Invalid or expired token") from None
