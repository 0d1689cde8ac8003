from __future__ import annotations

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from bitelist.app.deps import get_deadline_seconds, get_extractor
from bitelist.app.main import app
from bitelist.services.errors import (
    NetworkTimeoutError,
    NoContentFoundError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from bitelist.services.ingest import IngredientExtractor

YOUTUBE_URL = "https://youtu.be/abc123"


class FakeModel:
    def __init__(self, reply=None) -> None:
        self.reply = ["flour", "sugar"] if reply is None else reply
        self.recipe_texts: list[str] = []
        self.recipe_timeouts: list[Optional[float]] = []

    def _respond(self) -> list[str]:
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    def analyze_for_ingredients(self, context_text: str, *, timeout: Optional[float] = None) -> list[str]:
        return self._respond()

    def extract_from_recipe_text(self, recipe_text: str, *, timeout: Optional[float] = None) -> list[str]:
        self.recipe_texts.append(recipe_text)
        self.recipe_timeouts.append(timeout)
        return self._respond()


class FakeMetadata:
    def __init__(self, thumbnail="https://i.ytimg.com/vi/abc123/maxresdefault.jpg") -> None:
        self.thumbnail = thumbnail
        self.thumbnail_calls: list[str] = []

    def fetch_thumbnail(self, video_id: str, *, timeout: Optional[float] = None) -> str:
        self.thumbnail_calls.append(video_id)
        if isinstance(self.thumbnail, Exception):
            raise self.thumbnail
        return self.thumbnail

    def fetch_description(self, video_id: str, *, timeout: Optional[float] = None) -> str:
        raise QuotaExceededError(status_code=403)

    def list_caption_tracks(self, video_id: str, *, timeout: Optional[float] = None) -> list:
        return []


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def use_extractor(model=None, metadata=None, deadline: Optional[float] = None) -> None:
    extractor = IngredientExtractor(model, metadata)
    app.dependency_overrides[get_extractor] = lambda: extractor
    app.dependency_overrides[get_deadline_seconds] = lambda: deadline


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True}


class TestExtractEndpoint:
    def test_user_description(self, client: TestClient) -> None:
        use_extractor(FakeModel(["tomato", "basil"]), FakeMetadata())

        response = client.post("/ingredients/extract", json={"url": YOUTUBE_URL, "description": "tomato basil"})

        assert response.status_code == 200
        assert response.json() == {
            "ingredients": ["tomato", "basil"],
            "source": "user_provided",
            "usedModel": True,
        }

    def test_quota_on_metadata_still_returns_result(self, client: TestClient) -> None:
        use_extractor(FakeModel(["eggs"]), FakeMetadata())

        response = client.post("/ingredients/extract", json={"url": YOUTUBE_URL})

        assert response.status_code == 200
        assert response.json()["source"] == "generic_prompt"
        assert response.json()["ingredients"] == ["eggs"]

    def test_upstream_failure_is_502(self, client: TestClient) -> None:
        use_extractor(FakeModel(UpstreamUnavailableError("model down", status_code=500)), None)

        response = client.post("/ingredients/extract", json={"url": YOUTUBE_URL})

        assert response.status_code == 502
        assert "model down" in response.json()["detail"]

    def test_expired_deadline_is_504(self, client: TestClient) -> None:
        use_extractor(FakeModel(), FakeMetadata(), deadline=0.0)

        response = client.post("/ingredients/extract", json={"url": YOUTUBE_URL})

        assert response.status_code == 504

    def test_empty_url_is_rejected(self, client: TestClient) -> None:
        use_extractor(FakeModel(), FakeMetadata())

        response = client.post("/ingredients/extract", json={"url": ""})

        assert response.status_code == 422


class TestFromTextEndpoint:
    def test_extracts_from_recipe_text(self, client: TestClient) -> None:
        model = FakeModel(["flour", "water"])
        use_extractor(model)

        response = client.post("/ingredients/from-text", json={"text": "Mix flour and water."})

        assert response.status_code == 200
        assert response.json() == {"ingredients": ["flour", "water"]}
        assert model.recipe_texts == ["Mix flour and water."]

    def test_model_call_is_bounded_by_deadline(self, client: TestClient) -> None:
        model = FakeModel(["flour"])
        use_extractor(model, deadline=12.5)

        response = client.post("/ingredients/from-text", json={"text": "Mix flour and water."})

        assert response.status_code == 200
        assert model.recipe_timeouts == [12.5]

    def test_timeout_is_504(self, client: TestClient) -> None:
        use_extractor(FakeModel(NetworkTimeoutError("https://llm.test/v1/chat/completions", 12.5)), deadline=12.5)

        response = client.post("/ingredients/from-text", json={"text": "Mix flour and water."})

        assert response.status_code == 504

    def test_model_not_configured_is_503(self, client: TestClient) -> None:
        use_extractor(None)

        response = client.post("/ingredients/from-text", json={"text": "Mix flour and water."})

        assert response.status_code == 503

    def test_quota_is_429(self, client: TestClient) -> None:
        use_extractor(FakeModel(QuotaExceededError(status_code=429)))

        response = client.post("/ingredients/from-text", json={"text": "Mix flour and water."})

        assert response.status_code == 429

    def test_upstream_failure_is_502(self, client: TestClient) -> None:
        use_extractor(FakeModel(UpstreamUnavailableError("bad gateway", status_code=502)))

        response = client.post("/ingredients/from-text", json={"text": "Mix flour and water."})

        assert response.status_code == 502


class TestThumbnailEndpoint:
    def test_returns_thumbnail(self, client: TestClient) -> None:
        metadata = FakeMetadata()
        use_extractor(FakeModel(), metadata)

        response = client.get("/videos/thumbnail", params={"url": YOUTUBE_URL})

        assert response.status_code == 200
        assert response.json() == {
            "url": YOUTUBE_URL,
            "thumbnailUrl": "https://i.ytimg.com/vi/abc123/maxresdefault.jpg",
        }
        assert metadata.thumbnail_calls == ["abc123"]

    def test_non_youtube_url_is_400(self, client: TestClient) -> None:
        use_extractor(FakeModel(), FakeMetadata())

        response = client.get("/videos/thumbnail", params={"url": "https://www.instagram.com/p/C4stLiBL4SS/"})

        assert response.status_code == 400

    def test_metadata_not_configured_is_503(self, client: TestClient) -> None:
        use_extractor(FakeModel(), None)

        response = client.get("/videos/thumbnail", params={"url": YOUTUBE_URL})

        assert response.status_code == 503

    @pytest.mark.parametrize(
        "error, status",
        [
            (NoContentFoundError("none"), 404),
            (QuotaExceededError(status_code=403), 429),
            (UpstreamUnavailableError("down", status_code=500), 502),
        ],
    )
    def test_error_mapping(self, client: TestClient, error: Exception, status: int) -> None:
        use_extractor(FakeModel(), FakeMetadata(thumbnail=error))

        response = client.get("/videos/thumbnail", params={"url": YOUTUBE_URL})

        assert response.status_code == status
