"""
Dictionary resolution: map tag/sender names onto ids, creating unknown names.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from docstore.database import UnitOfWork
from docstore.errors import NotFoundError
from docstore.repositories import DictionaryRepository

logger = logging.getLogger(__name__)

SEPARATOR = ";"


def resolve(
    repo: DictionaryRepository, names: List[str], unit: Optional[UnitOfWork] = None
) -> Tuple[List[int], str]:
    """Return the ids for ``names`` and the ``;``-joined display string.

    Known names contribute their stored spelling to the display string, new
    names the supplied one. Order follows the input; blank names are skipped.
    """
    ids: List[int] = []
    display: List[str] = []
    for name in names:
        if not name or not name.strip():
            logger.debug("skipping blank %s name", repo.kind)
            continue
        try:
            entry = repo.get_by_name(name, unit)
            display.append(entry.name)
        except NotFoundError:
            logger.info("%s '%s' not found, creating it", repo.kind, name)
            entry = repo.create(name, unit)
            display.append(name)
        ids.append(entry.id)
    return ids, SEPARATOR.join(display)


def split(display: Optional[str]) -> List[str]:
    """Inverse of the joined display string; an empty string yields no names."""
    if not display:
        return []
    return display.split(SEPARATOR)
