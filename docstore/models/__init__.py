from docstore.models.dictionary import (
    DocumentSenderModel,
    DocumentTagModel,
    SenderModel,
    TagModel,
)
from docstore.models.document import DocumentModel
from docstore.models.upload import UploadModel

__all__ = [
    "DocumentModel",
    "DocumentSenderModel",
    "DocumentTagModel",
    "SenderModel",
    "TagModel",
    "UploadModel",
]
