"""
Staging rows for files uploaded but not yet attached to a document.
"""
from sqlalchemy import Column, DateTime, String

from docstore.database import Base


class UploadModel(Base):
    __tablename__ = "uploads"

    id = Column(String(36), primary_key=True)
    file_name = Column(String(255), nullable=False)
    mime_type = Column(String(255), nullable=False)
    created = Column(DateTime, nullable=False)
