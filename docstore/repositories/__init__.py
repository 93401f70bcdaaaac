"""
Data access for documents, dictionaries and upload staging rows.

Every mutating method takes an optional unit of work: when an active one is
passed the caller owns the transaction, otherwise the method opens its own.
Reads run inside the supplied unit when there is one.
"""
from docstore.repositories.base import Repository, utcnow
from docstore.repositories.dictionary import (
    DictionaryRepository,
    SenderRepository,
    TagRepository,
)
from docstore.repositories.documents import (
    DocSearch,
    DocumentEntity,
    DocumentRepository,
    OrderBy,
    PagedResult,
)
from docstore.repositories.uploads import UploadItem, UploadRepository

__all__ = [
    "DictionaryRepository",
    "DocSearch",
    "DocumentEntity",
    "DocumentRepository",
    "OrderBy",
    "PagedResult",
    "Repository",
    "SenderRepository",
    "TagRepository",
    "UploadItem",
    "UploadRepository",
    "utcnow",
]
