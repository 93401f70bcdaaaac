"""
docstore contracts — JSON shapes exchanged over the HTTP API.

Field names on the wire are camelCase; Python attributes stay snake_case.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class Document(_Wire):
    """Document payload, used for both the request body and responses."""
    id: str = ""
    alt_id: str = Field("", alias="alternativeId")
    title: str = Field(..., min_length=1)
    amount: float = 0.0
    created: str = ""
    modified: Optional[str] = None
    file_name: str = ""
    preview_link: Optional[str] = None
    upload_token: Optional[str] = Field(None, alias="uploadFileToken")
    tags: List[str] = Field(default_factory=list)
    senders: List[str] = Field(default_factory=list)


class PagedDocuments(_Wire):
    documents: List[Document] = Field(default_factory=list)
    total_entries: int = 0


class ActionResult(str, Enum):
    NONE = "None"
    CREATED = "Created"
    UPDATED = "Updated"
    DELETED = "Deleted"
    ERROR = "Error"


class Result(_Wire):
    message: str
    result: ActionResult


# ---------------------------------------------------------------------------
# Uploads, catalogs, app info
# ---------------------------------------------------------------------------

class UploadResult(_Wire):
    token: str
    message: str


class CatalogEntry(_Wire):
    """A tag or a sender."""
    id: int
    name: str


class UserInfo(_Wire):
    display_name: str = ""
    user_id: str = ""
    user_name: str = ""
    email: str = ""
    roles: List[str] = Field(default_factory=list)


class VersionInfo(_Wire):
    version: str
    build_number: str


class AppInfo(_Wire):
    user_info: UserInfo
    version_info: VersionInfo


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ProblemDetail(BaseModel):
    """RFC 7807 error envelope."""
    type: str = "about:blank"
    title: str
    status: int
    detail: str = ""
    instance: str = ""
