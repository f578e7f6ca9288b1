from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime, timezone

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class StorageItem(Base):
    """Par chave/valor no banco; cada chave guarda um texto JSON inteiro."""
    __tablename__ = 'storage_items'
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
