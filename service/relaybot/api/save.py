"""
Save API.

Writes an arbitrary JSON document to DATA_DIR.
"""

from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from relaybot.logging_config import bot_logger as logger

router = APIRouter(tags=["save"])


class SaveRequest(BaseModel):
    filename: Optional[str] = None
    data: Any = None


class SaveResponse(BaseModel):
    ok: bool
    path: str


@router.post("/save", response_model=SaveResponse)
async def save_json(body: SaveRequest, request: Request):
    """
    Save `data` as DATA_DIR/<filename>.json.

    Returns {"ok": true, "path": ...} or {"error": ...}.
    """
    if not body.filename or not body.filename.strip():
        return JSONResponse(status_code=400, content={"error": "filename is required"})

    files = request.app.state.bot.files

    try:
        path = files.save_json(body.filename, body.data)
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to save {body.filename}: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    logger.info(f"Saved JSON to {path}")
    return SaveResponse(ok=True, path=str(path))
