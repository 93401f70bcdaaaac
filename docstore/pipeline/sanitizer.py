"""
HTML sanitising of user-controlled strings.

Uses a user-generated-content policy: harmless formatting markup survives,
scripts, styles and event handlers never do.
"""
from __future__ import annotations

from typing import List, Optional

import nh3

from docstore.schemas import Document

UGC_TAGS = {
    "a", "abbr", "b", "blockquote", "br", "code", "del", "em", "h1", "h2",
    "h3", "h4", "h5", "h6", "hr", "i", "ins", "li", "ol", "p", "pre", "q",
    "s", "small", "span", "strong", "sub", "sup", "table", "tbody", "td",
    "th", "thead", "tr", "u", "ul",
}
UGC_ATTRIBUTES = {
    "a": {"href", "title"},
    "abbr": {"title"},
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan"},
}
UGC_URL_SCHEMES = {"http", "https", "mailto"}


def sanitize(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    return nh3.clean(
        value,
        tags=UGC_TAGS,
        attributes=UGC_ATTRIBUTES,
        url_schemes=UGC_URL_SCHEMES,
        link_rel="nofollow noopener noreferrer",
    )


def sanitize_list(values: Optional[List[str]]) -> List[str]:
    return [sanitize(v) for v in values or []]


def sanitize_document(doc: Document) -> Document:
    """Return a copy of ``doc`` with every string field sanitised."""
    return doc.model_copy(
        update={
            "title": sanitize(doc.title),
            "alt_id": sanitize(doc.alt_id),
            "created": sanitize(doc.created),
            "modified": sanitize(doc.modified),
            "file_name": sanitize(doc.file_name),
            "preview_link": sanitize(doc.preview_link),
            "upload_token": sanitize(doc.upload_token),
            "tags": sanitize_list(doc.tags),
            "senders": sanitize_list(doc.senders),
        }
    )
