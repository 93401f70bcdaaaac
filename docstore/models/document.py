"""
SQLAlchemy model for document metadata.
"""
from sqlalchemy import Column, DateTime, Float, String

from docstore.database import Base


class DocumentModel(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    file_name = Column(String(255), nullable=False, default="")
    alt_id = Column(String(8), nullable=False, unique=True)
    preview_link = Column(String(512))
    amount = Column(Float, nullable=False, default=0.0)
    tag_list = Column(String(255), nullable=False, default="")
    sender_list = Column(String(255), nullable=False, default="")
    created = Column(DateTime, nullable=False)
    modified = Column(DateTime)
