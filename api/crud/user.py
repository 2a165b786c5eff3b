from sqlalchemy.orm import Session
from typing import Optional
from models.user import User
from core.roles import UserRole


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, username: str, email: str = None, role: UserRole = UserRole.USER) -> User:
    db_user = User(username=username, email=email, role=role)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
