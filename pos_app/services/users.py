# pos_app/services/users.py

import logging

from sqlalchemy.orm import Session

from pos_app.core.config import settings
from pos_app.core.errors import ValidationError
from pos_app.core.hashing import hash_password, verify_password
from pos_app.models.users import User

logger = logging.getLogger(__name__)


def create_user(db: Session, email: str, password: str, name: str | None = None, role: str = "staff") -> User:
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ValidationError("Email already exists", field="email")

    user = User(
        email=email,
        name=name,
        role=role,
        password_hash=hash_password(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def seed_admin(db: Session) -> User | None:
    """Create the configured admin when the users table is empty."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return None
    if db.query(User).first() is not None:
        return None

    user = create_user(
        db,
        settings.ADMIN_EMAIL,
        settings.ADMIN_PASSWORD,
        name=settings.ADMIN_NAME,
        role="admin",
    )
    logger.info("Seeded admin user %s", user.email)
    return user
