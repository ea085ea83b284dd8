import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.errors import AuthenticationError, DuplicateEmailError, UserNotFoundError
from app.core.security import get_password_hash, verify_password
from app.db.models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalars(
        select(User).where(func.lower(User.email) == normalize_email(email)).limit(1)
    ).first()


def get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def create_user(db: Session, email: str, password: str, name: str | None = None) -> User:
    email = normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise DuplicateEmailError(email)

    user = User(email=email, password_hash=get_password_hash(password), name=name)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmailError(email) from exc

    db.refresh(user)
    logger.info("user_created", extra={"user_id": user.id})
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        logger.info("login_rejected")
        raise AuthenticationError("Invalid email or password")

    user.last_login_at = utcnow()
    db.commit()
    db.refresh(user)
    return user


def update_user(
    db: Session,
    user_id: str,
    *,
    email: str | None = None,
    password: str | None = None,
    name: str | None = None,
) -> User:
    user = get_user(db, user_id)

    if email is not None:
        email = normalize_email(email)
        existing = get_user_by_email(db, email)
        if existing is not None and existing.id != user.id:
            raise DuplicateEmailError(email)
        user.email = email
    if password is not None:
        user.password_hash = get_password_hash(password)
    if name is not None:
        user.name = name

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmailError(email or user.email) from exc

    db.refresh(user)
    return user


def delete_user(db: Session, user_id: str) -> None:
    user = get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("user_deleted", extra={"user_id": user_id})
