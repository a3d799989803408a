from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func
from talkit.database import Base


class Document(Base):
    __tablename__ = "documents"

    collection = Column(String(128), primary_key=True)
    doc_id = Column(String(255), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
