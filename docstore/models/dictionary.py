"""
Tag and sender dictionaries plus the link tables tying them to documents.
"""
from sqlalchemy import Column, ForeignKey, Integer, String

from docstore.database import Base


class TagModel(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)


class SenderModel(Base):
    __tablename__ = "senders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)


class DocumentTagModel(Base):
    __tablename__ = "documents_to_tags"

    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), primary_key=True)


class DocumentSenderModel(Base):
    __tablename__ = "documents_to_senders"

    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True)
    sender_id = Column(Integer, ForeignKey("senders.id"), primary_key=True)
