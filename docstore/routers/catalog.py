"""
Tag and sender catalogs.

GET /api/v1/tags             — all tags, alphabetical
GET /api/v1/tags/search      — tags matching ?name=
GET /api/v1/senders          — all senders, alphabetical
GET /api/v1/senders/search   — senders matching ?name=
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends

from docstore.dependencies import get_stores
from docstore.pipeline import Stores
from docstore.schemas import CatalogEntry

logger = logging.getLogger(__name__)
router = APIRouter()


def _entries(rows) -> List[CatalogEntry]:
    return [CatalogEntry(id=r.id, name=r.name) for r in rows]


# ── GET /api/v1/tags ─────────────────────────────────────────────────────
@router.get("/tags", response_model=List[CatalogEntry])
def get_all_tags(stores: Stores = Depends(get_stores)):
    logger.debug("return all available tags")
    return _entries(stores.tags.get_all())


# ── GET /api/v1/tags/search ──────────────────────────────────────────────
@router.get("/tags/search", response_model=List[CatalogEntry])
def search_tags(name: str = "", stores: Stores = Depends(get_stores)):
    logger.debug("search for tags which match '%s'", name)
    return _entries(stores.tags.search(name))


# ── GET /api/v1/senders ──────────────────────────────────────────────────
@router.get("/senders", response_model=List[CatalogEntry])
def get_all_senders(stores: Stores = Depends(get_stores)):
    logger.debug("return all available senders")
    return _entries(stores.senders.get_all())


# ── GET /api/v1/senders/search ───────────────────────────────────────────
@router.get("/senders/search", response_model=List[CatalogEntry])
def search_senders(name: str = "", stores: Stores = Depends(get_stores)):
    logger.debug("search for senders which match '%s'", name)
    return _entries(stores.senders.search(name))
