"""Password hashing and Basic credential parsing."""

import base64
import binascii
from typing import Tuple

from passlib.context import CryptContext

from ..config import get_settings
from ..errors.problem_details import BadRequestError


# Use bcrypt for secure password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=get_settings().password_hash_rounds
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its hash.

    Returns:
        True if the password matches, False otherwise (including unreadable hashes)
    """
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        return False


def parse_basic_token(authorization: str) -> Tuple[str, str]:
    """Split a ``Basic <base64(email:password)>`` header into its credentials.

    Args:
        authorization: The Authorization header value

    Returns:
        Tuple of (email, password)

    Raises:
        BadRequestError: If the header is not a well-formed Basic credential
    """
    scheme, _, encoded = (authorization or "").strip().partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        raise BadRequestError("Invalid token format. Expected 'Basic <credentials>'")

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise BadRequestError("Invalid token format. Credentials are not valid base64")

    email, sep, password = decoded.partition(":")
    if not sep or not email or not password:
        raise BadRequestError("Invalid token format. Expected 'email:password'")

    return email, password
