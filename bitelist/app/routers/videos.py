# bitelist/app/routers/videos.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.concurrency import run_in_threadpool

from bitelist.app.deps import get_extractor
from bitelist.app.schemas.ingredients import ThumbnailResponse
from bitelist.services.errors import (
    NoContentFoundError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from bitelist.services.ids import resolve
from bitelist.services.ingest import IngredientExtractor
from bitelist.services.types import Platform

log = logging.getLogger("videos")
router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("/thumbnail", response_model=ThumbnailResponse)
async def get_thumbnail(
    url: str = Query(min_length=1),
    extractor: IngredientExtractor = Depends(get_extractor),
) -> ThumbnailResponse:
    reference = resolve(url)
    if reference.platform is not Platform.YOUTUBE:
        raise HTTPException(status_code=400, detail="Thumbnails are only available for YouTube URLs")

    client = extractor.metadata_client
    if client is None:
        raise HTTPException(status_code=503, detail="YouTube API is not configured")

    try:
        thumbnail_url = await run_in_threadpool(client.fetch_thumbnail, reference.video_id)
    except NoContentFoundError as exc:
        raise HTTPException(status_code=404, detail="No thumbnail available for this video") from exc
    except QuotaExceededError as exc:
        log.warning("thumbnail.quota video=%s", reference.video_id)
        raise HTTPException(status_code=429, detail="YouTube API quota exceeded") from exc
    except UpstreamUnavailableError as exc:
        log.warning("thumbnail.unavailable video=%s error=%s", reference.video_id, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return ThumbnailResponse(url=url, thumbnailUrl=thumbnail_url)
