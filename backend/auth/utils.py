import uuid

import bcrypt


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), (hashed or "").encode())
    except ValueError:
        # Malformed stored hash.
        return False
