from sqlalchemy.orm import Session

from shelfy.core.security import verify_password
from shelfy.db.models.user import User


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Return the user if email+password are valid, otherwise None."""
    user = db.query(User).filter(User.email == email.lower()).first()
    if user is None:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    if not user.is_active:
        return None
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.lower()).first()
