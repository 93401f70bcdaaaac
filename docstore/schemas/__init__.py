from docstore.schemas.base import (
    ActionResult,
    AppInfo,
    CatalogEntry,
    Document,
    PagedDocuments,
    ProblemDetail,
    Result,
    UploadResult,
    UserInfo,
    VersionInfo,
)

__all__ = [
    "ActionResult",
    "AppInfo",
    "CatalogEntry",
    "Document",
    "PagedDocuments",
    "ProblemDetail",
    "Result",
    "UploadResult",
    "UserInfo",
    "VersionInfo",
]
