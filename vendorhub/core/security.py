import base64
import hashlib
import secrets

_SCRYPT = {"n": 2**14, "r": 8, "p": 1}


def hash_password(plain: str) -> str:
    # Stored as scrypt$<salt>$<digest>, both base64; a fresh salt per call.
    salt = secrets.token_bytes(16)
    digest = hashlib.scrypt(plain.encode("utf-8"), salt=salt, **_SCRYPT)
    return "scrypt${}${}".format(
        base64.b64encode(salt).decode("utf-8"),
        base64.b64encode(digest).decode("utf-8"),
    )
