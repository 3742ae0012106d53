from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from verihow.db.session import Base


class KeyValueEntry(Base):
    __tablename__ = "kv_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
