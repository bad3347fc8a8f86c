from sqlalchemy import Boolean, Column, Integer, JSON, String

from ..database import Base


class User(Base):
    """SQLAlchemy model for application users."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    roles = Column(JSON, default=lambda: ["Employee"], nullable=False)
    active = Column(Boolean, default=True, nullable=False)
