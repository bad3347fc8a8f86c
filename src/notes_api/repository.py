"""Data access for users and notes.

Repositories flush their writes but never commit; the calling service owns
the transaction and decides when to commit or roll back.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from .models.note import Note
from .models.user import User


class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def find_all(self) -> List[User]:
        return self.session.query(User).order_by(User.id).all()

    def find_by_username(self, username: str) -> Optional[User]:
        return self.session.query(User).filter(User.username == username).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def count(self) -> int:
        return self.session.query(User).count()

    def create(self, fields: Dict[str, Any]) -> Optional[User]:
        user = User(**fields)
        self.session.add(user)
        self.session.flush()
        return user if user.id is not None else None

    def save(self, user: User) -> Optional[User]:
        self.session.add(user)
        self.session.flush()
        return user if inspect(user).persistent else None

    def delete(self, user: User) -> bool:
        self.session.delete(user)
        self.session.flush()
        return self.session.get(User, user.id) is None


class NoteRepository:
    def __init__(self, session: Session):
        self.session = session

    def find_by_user(self, user_id: int) -> List[Note]:
        return self.session.query(Note).filter(Note.user == user_id).all()
