"""User model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text
from gatepass.database import Base


class User(Base):
    """Represents a resident or visitor tracked at the gate."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    password = Column(Text, nullable=False)
    image = Column(Text)
    phone = Column(String(15))
    role = Column(String(50), default="Student")  # Student/Visitor/Warden
    status = Column(String(20), default="in")  # in/out/home
    offences = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
