"""Password hashing and verification (bcrypt, 12 rounds)."""

from typing import Optional

from passlib.context import CryptContext

BCRYPT_ROUNDS = 12

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)

# Verified against when the user is unknown, so every login attempt pays one bcrypt
FAKE_HASHED_PASSWORD = pwd_context.hash("this_is_a_fake_user_that_never_exists")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    """True when ``plain`` matches ``hashed``. A missing or unreadable hash never matches."""
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def verify_dummy(plain: str) -> None:
    """Spend the same time as a real verification, result discarded."""
    pwd_context.verify(plain, FAKE_HASHED_PASSWORD)
