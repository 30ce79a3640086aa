import base64
import binascii
import hmac
import secrets
from hashlib import pbkdf2_hmac

ITERATIONS = 100_000
SALT_BYTES = 16
KEY_BYTES = 32


def generate_salt() -> str:
    return base64.b64encode(secrets.token_bytes(SALT_BYTES)).decode("ascii")


def _derive(password: str, salt: bytes) -> bytes:
    return pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, ITERATIONS, dklen=KEY_BYTES
    )


def hash_password(password: str, salt: str) -> str:
    """Derives the base64 PBKDF2-HMAC-SHA256 digest stored for a user."""
    return base64.b64encode(_derive(password, base64.b64decode(salt))).decode(
        "ascii"
    )


def verify_password(password: str, salt: str, expected_hash: str) -> bool:
    try:
        expected = base64.b64decode(expected_hash, validate=True)
        actual = _derive(password, base64.b64decode(salt, validate=True))
    except (binascii.Error, ValueError):
        return False
    return hmac.compare_digest(actual, expected)
