# Overview: Service-layer operations for user accounts; password hashing and creation.

"""
User Account Service

WHY: Every sale and attendance row is attributable to a person. Uses bcrypt
for password hashing and validates password strength at creation time.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, with uppercase, lowercase and a digit
"""

import bcrypt
import re
from ..extensions import db
from ..errors import ConflictError, ValidationError
from ..models import User, CompanySettings, USER_ROLES
from ..validation import coerce_amount, coerce_choice


DEFAULT_COMPANY_NAME = "POS Back Office"


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash (e.g. a placeholder written by a fixture)
        return False


def create_user(
    username: str,
    email: str,
    password: str,
    full_name: str,
    role: str = "USER",
    hourly_rate=None,
) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        ConflictError: username or email already taken
        PasswordValidationError: password doesn't meet requirements
        ValidationError: unknown role or bad hourly rate
    """
    username = (username or "").strip()
    email = (email or "").strip()
    full_name = (full_name or "").strip()
    if not username or not email or not full_name:
        raise ValidationError("username, email and full name are required")

    role = coerce_choice(role, "role", USER_ROLES)
    rate = coerce_amount(hourly_rate, "hourlyRate", positive=False) if hourly_rate is not None else None

    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        raise ConflictError("Username or email already exists")

    # Hash password with bcrypt (validates strength automatically)
    password_hash = hash_password(password)

    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        full_name=full_name,
        role=role,
        hourly_rate=rate,
    )

    db.session.add(user)
    db.session.commit()
    return user


def authenticate(username: str, password: str) -> User | None:
    """Return the active user for these credentials, else None."""
    user = db.session.query(User).filter_by(username=username).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def ensure_company_settings(company_name: str = DEFAULT_COMPANY_NAME) -> CompanySettings:
    """Idempotently create the single company settings row."""
    settings = db.session.query(CompanySettings).first()
    if settings:
        return settings
    settings = CompanySettings(company_name=company_name)
    db.session.add(settings)
    db.session.commit()
    return settings
