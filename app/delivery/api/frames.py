# app/delivery/api/frames.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.config.database import get_db
from app.domain.frame_service import FrameService, FrameServiceError
import logging

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


def get_frame_service(db: AsyncSession = Depends(get_db)) -> FrameService:
    return FrameService(db)


def to_http_exception(error: FrameServiceError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=str(error))


@router.get("/frames/{username}")
async def frames_data(
    username: str,
    collectionId: Optional[str] = None,
    service: FrameService = Depends(get_frame_service),
):
    """Loader data for a user's page as JSON (camelCase keys, no owner ids)."""
    try:
        view = await service.load_view(username, collectionId)
    except FrameServiceError as e:
        logger.warning(f"Loader for '{username}' failed: {e}")
        raise to_http_exception(e)
    return JSONResponse(status_code=200, content=view.model_dump(mode="json", by_alias=True))
