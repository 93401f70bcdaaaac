"""
Static file serving for the single-page UI.

Unknown paths requested by a browser get the SPA index file so client-side
routes survive a reload; other clients still see the 404.
"""
import logging
import os

from fastapi.staticfiles import StaticFiles
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException
from starlette.responses import FileResponse
from starlette.types import Scope

from docstore.problem import Content, negotiate_content

logger = logging.getLogger(__name__)


class SpaStaticFiles(StaticFiles):
    def __init__(self, directory: str, index_file: str = "index.html"):
        super().__init__(directory=directory, html=True)
        self.index_path = os.path.join(directory, index_file)

    async def get_response(self, path: str, scope: Scope):
        try:
            return await super().get_response(path, scope)
        except HTTPException as e:
            if e.status_code != 404:
                raise
            accept = Headers(scope=scope).get("accept", "")
            if negotiate_content(accept) is not Content.HTML:
                raise
            logger.debug("serving SPA index for unknown path '%s'", path)
            return FileResponse(self.index_path)
