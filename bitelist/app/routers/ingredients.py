# bitelist/app/routers/ingredients.py
from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from bitelist.app.deps import get_deadline_seconds, get_extractor
from bitelist.app.schemas.ingredients import (
    ExtractIngredientsRequest,
    ExtractIngredientsResponse,
    RecipeTextRequest,
    RecipeTextResponse,
)
from bitelist.services.cancellation import CancellationToken
from bitelist.services.errors import (
    ExtractionCancelledError,
    NetworkTimeoutError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from bitelist.services.ingest import IngredientExtractor

log = logging.getLogger("ingredients")
router = APIRouter(prefix="/ingredients", tags=["ingredients"])


@router.post("/extract", response_model=ExtractIngredientsResponse)
async def extract_ingredients(
    body: ExtractIngredientsRequest,
    extractor: IngredientExtractor = Depends(get_extractor),
    deadline_seconds: Optional[float] = Depends(get_deadline_seconds),
) -> ExtractIngredientsResponse:
    t0 = time.time()
    log.info("extract.start url=%s", body.url)
    token = CancellationToken(deadline_seconds)

    try:
        result = await run_in_threadpool(
            extractor.extract,
            body.url,
            body.description,
            cancel_token=token,
        )
    except ExtractionCancelledError as exc:
        log.warning("extract.cancelled url=%s stage=%s dt=%.2fs", body.url, exc.stage, time.time() - t0)
        raise HTTPException(status_code=504, detail="Ingredient extraction timed out") from exc
    except UpstreamUnavailableError as exc:
        log.warning("extract.unavailable url=%s dt=%.2fs error=%s", body.url, time.time() - t0, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    log.info(
        "extract.ok url=%s source=%s count=%d dt=%.2fs",
        body.url,
        result.source.value,
        len(result.ingredients),
        time.time() - t0,
    )
    return ExtractIngredientsResponse(
        ingredients=list(result.ingredients),
        source=result.source.value,
        usedModel=result.used_model,
    )


@router.post("/from-text", response_model=RecipeTextResponse)
async def extract_from_recipe_text(
    body: RecipeTextRequest,
    extractor: IngredientExtractor = Depends(get_extractor),
    deadline_seconds: Optional[float] = Depends(get_deadline_seconds),
) -> RecipeTextResponse:
    if extractor.model_client is None:
        raise HTTPException(status_code=503, detail="Language model is not configured")

    try:
        ingredients = await run_in_threadpool(
            extractor.model_client.extract_from_recipe_text,
            body.text,
            timeout=deadline_seconds,
        )
    except NetworkTimeoutError as exc:
        log.warning("from_text.timeout after=%ss", exc.timeout_seconds)
        raise HTTPException(status_code=504, detail="Ingredient extraction timed out") from exc
    except QuotaExceededError as exc:
        log.warning("from_text.quota status=%s", exc.status_code)
        raise HTTPException(status_code=429, detail="Language model quota exceeded") from exc
    except UpstreamUnavailableError as exc:
        log.warning("from_text.unavailable error=%s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return RecipeTextResponse(ingredients=ingredients)
