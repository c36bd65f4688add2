"""Gate and out-of-hostel request model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text
from gatepass.database import Base

PENDING = "Pending"
APPROVED = "Approved"
REJECTED = "Rejected"

GATE_REQUEST_TYPES = ("in", "out")
OUT_OF_HOSTEL_REQUEST_TYPE = "OOHostel"


class GateRequest(Base):
    """Represents a request awaiting a gate or warden decision."""
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True)
    username = Column(String(255), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    image = Column(Text)
    purpose = Column(Text, nullable=False)
    role = Column(String(20), default="Student")
    status = Column(String(20), default=PENDING, nullable=False)
    requested_at = Column(DateTime, default=datetime.now)


def category_types(request_type: str) -> tuple[str, ...]:
    """Return every type value sharing ``request_type``'s pending-uniqueness category."""
    if request_type in GATE_REQUEST_TYPES:
        return GATE_REQUEST_TYPES
    return (request_type,)
