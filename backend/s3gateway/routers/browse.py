import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, StreamingResponse

from s3gateway.exceptions import InvalidPath
from s3gateway.rendering import folder_url, render_folder
from s3gateway.resolver import PathResolver
from s3gateway.schemas import ObjectFile

router = APIRouter(tags=["browse"])
logger = logging.getLogger(__name__)

FILE_MEDIA_TYPE = "application/octet-stream"


def get_resolver(request: Request) -> PathResolver:
    """Resolver built at startup and shared by every request."""
    return request.app.state.resolver


def normalize_request_path(path: str) -> str:
    """Turn the raw route parameter into a bucket key.

    Only one trailing slash is dropped, so ``folder/`` and ``folder`` name the
    same thing; every other slash is part of the key. ``.``/``..`` segments,
    backslashes and NUL bytes are rejected.
    """
    if "\x00" in path or "\\" in path:
        raise InvalidPath(path)

    if any(segment in (".", "..") for segment in path.split("/")):
        raise InvalidPath(path)

    return path[:-1] if path.endswith("/") else path


@router.get("/{path:path}")
def browse(request: Request, path: str, resolver: PathResolver = Depends(get_resolver)):
    """Serve an object, or the listing of a folder."""
    key = normalize_request_path(path)
    result = resolver.resolve(key)

    if isinstance(result, ObjectFile):
        headers = {}
        if result.content_length is not None:
            headers["Content-Length"] = str(result.content_length)
        logger.debug(f"Serving file: path={key}", extra={"path": key, "operation": "get_object"})
        return StreamingResponse(
            result.iter_bytes(),
            media_type=FILE_MEDIA_TYPE,
            headers=headers
        )

    logger.debug(
        f"Serving folder: path={key}, entries={len(result.entries)}",
        extra={"path": key, "operation": "list_objects"}
    )
    # /folder and /folder/ render the same page; the base keeps links inside the folder
    return HTMLResponse(content=render_folder(
        result.path,
        result.entries,
        base_url=folder_url(result.path, request.scope.get("root_path", ""))
    ))
