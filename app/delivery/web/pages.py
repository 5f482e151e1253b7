# app/delivery/web/pages.py
"""HTML route for a user's frames page: loader on GET, action on POST."""
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from app.config.settings import settings
from app.delivery.api.frames import get_frame_service, to_http_exception
from app.domain import grid_layout
from app.domain.frame_service import FrameService, FrameServiceError
import logging
import traceback

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
logger = logging.getLogger("uvicorn.error")


def page_url(username: str, collection_id: Optional[str] = None, secret: Optional[str] = None) -> str:
    params = {}
    if collection_id:
        params["collectionId"] = collection_id
    if secret:
        params["secret"] = secret
    return f"/{username}?{urlencode(params)}" if params else f"/{username}"


@router.get("/{username}", response_class=HTMLResponse)
async def frames_page(
    request: Request,
    username: str,
    collectionId: Optional[str] = None,
    secret: Optional[str] = None,
    service: FrameService = Depends(get_frame_service),
):
    try:
        view, can_edit = await service.load_page(username, collectionId, secret)
    except FrameServiceError as e:
        logger.warning(f"Page for '{username}' not rendered: {e}")
        raise to_http_exception(e)

    frames = view.collection.frames
    first_run = not frames and len(view.collections) == 1
    # only echo the secret back when it actually grants edit rights
    user_secret = secret if can_edit else None
    return templates.TemplateResponse(
        request,
        "frames.html",
        {
            "view": view,
            "secret": user_secret,
            "first_run": first_run,
            "grid_css": grid_layout.grid_css(frames, editing=can_edit),
            "page_url": page_url,
            "site_url": settings.SITE_URL,
        },
    )


@router.post("/{username}")
async def frames_action(
    request: Request,
    username: str,
    service: FrameService = Depends(get_frame_service),
):
    form = await request.form()
    try:
        user = await service.authenticate(username, form.get("userId"))
        collection = await service.apply(user, form)
        if collection is not None:
            return RedirectResponse(
                page_url(user.username, collection.id, form.get("userId")),
                status_code=status.HTTP_302_FOUND,
            )
        return Response(status_code=status.HTTP_200_OK)

    except FrameServiceError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Action for '{username}' failed ({form.get('intent') or 'create'}): {e}\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error.",
        )
