from sqlalchemy import Column, DateTime, String, Text

from thermoscan.database import Base
from thermoscan.utils.timezone_utils import utc_now


class KeyValueEntry(Base):
    """Single JSON document stored under a string key."""

    __tablename__ = "key_value_entries"
    __table_args__ = {"extend_existing": True}

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
