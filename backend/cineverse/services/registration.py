"""User registration."""

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cineverse.core.app_exceptions import Conflict, ValidationFailed
from cineverse.core.config import settings
from cineverse.core.logging import get_logger
from cineverse.core.security import hash_password
from cineverse.models.user import User, UserRole

logger = get_logger(__name__)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == email.lower().strip()).first()


def _initial_role(db: Session, email: str) -> UserRole:
    """SUPER_ADMIN for the bootstrap email while no super admin exists yet."""
    bootstrap = settings.SUPER_ADMIN_EMAIL
    if not bootstrap or email != bootstrap.lower().strip():
        return UserRole.USER

    existing = db.query(User).filter(User.role == UserRole.SUPER_ADMIN.value).first()
    if existing:
        logger.warning("Bootstrap email registered but a super admin already exists")
        return UserRole.USER
    return UserRole.SUPER_ADMIN


def register_user(db: Session, name: str, email: str, password: str) -> User:
    """Create a user account.

    Raises ValidationFailed when a field is missing and Conflict when the
    email is already registered; no row is written in either case.
    """
    name = (name or "").strip()
    email = (email or "").lower().strip()
    if not name or not email or not password:
        raise ValidationFailed("Missing name, email, or password")

    if find_user_by_email(db, email):
        raise Conflict("User with this email already exists")

    role = _initial_role(db, email)
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise Conflict("User with this email already exists") from e
    db.refresh(user)

    logger.info("User registered", extra={"user_id": str(user.id), "role": user.role})
    return user
