"""
FastAPI dependencies wiring the process-wide singletons into request handlers.
"""
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker

from docstore.config import Settings
from docstore.filestore import FileStore
from docstore.pipeline import Stores
from docstore.pipeline.deadline import Deadline
from docstore.repositories import (
    DocumentRepository,
    SenderRepository,
    TagRepository,
    UploadRepository,
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> sessionmaker:
    return request.app.state.session_factory


def get_filestore(request: Request) -> FileStore:
    return request.app.state.filestore


def get_stores(
    settings: Settings = Depends(get_settings),
    session_factory: sessionmaker = Depends(get_session_factory),
    filestore: FileStore = Depends(get_filestore),
) -> Stores:
    return Stores(
        session_factory=session_factory,
        documents=DocumentRepository(session_factory),
        tags=TagRepository(session_factory),
        senders=SenderRepository(session_factory),
        uploads=UploadRepository(session_factory),
        filestore=filestore,
        upload=settings.upload,
    )


def get_deadline(settings: Settings = Depends(get_settings)) -> Deadline:
    return Deadline(settings.app.request_timeout_seconds)
