# bitelist/app/deps.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends

from bitelist.app.config import Settings, get_settings
from bitelist.services.ingest import IngredientExtractor, build_extractor


def get_extractor(settings: Settings = Depends(get_settings)) -> IngredientExtractor:
    return build_extractor(settings)


def get_deadline_seconds(settings: Settings = Depends(get_settings)) -> Optional[float]:
    return settings.EXTRACTION_DEADLINE_SECONDS
