"""
Password Hashing and Verification
Uses bcrypt for secure password storage
"""

from passlib.context import CryptContext
import secrets
import string

# Password context for hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    """
    Hash a plain password

    Args:
        password: Plain text password

    Returns:
        Hashed password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash

    Returns:
        True if password matches, False otherwise (also for unusable hashes)
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def generate_random_password(length: int = 12) -> str:
    """
    Temporary password for accounts created by an admin

    Always contains at least one lowercase letter, one uppercase letter and one digit.
    """
    characters = string.ascii_letters + string.digits
    while True:
        password = ''.join(secrets.choice(characters) for _ in range(length))
        if (any(c.islower() for c in password)
                and any(c.isupper() for c in password)
                and any(c.isdigit() for c in password)):
            return password


def roster_password(first_name: str, phone: str) -> str:
    """Initial password for roster imported accounts: firstname + last 4 phone digits"""
    return f"{(first_name or '').strip().lower()}{str(phone or '')[-4:]}"
