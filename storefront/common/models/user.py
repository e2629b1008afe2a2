from sqlalchemy import Column, DateTime, String, func
from .base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default="user")  # user / admin
    created_at = Column(DateTime, nullable=False, server_default=func.now())
