import json

import httpx
import pytest

from profolia.core.config import settings
from profolia.core.errors import ClassificationError
from profolia.platform.adapters.classifier_anthropic import AnthropicClassifier, parse_classifications
from profolia.platform.ports.content_classifier import ClassifierItem

ITEMS = [ClassifierItem("a.jpg", "image"), ClassifierItem("b.mp4", "video", "Showreel")]


def _classifier(handler) -> AnthropicClassifier:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AnthropicClassifier("test-key", model="test-model", base_url="https://llm.test", client=client)


def _reply(text: str):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"content": [{"type": "text", "text": text}]})
    return handler


async def test_sends_one_request_with_all_items():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"content": [{"type": "text", "text": "[]"}]})

    await _classifier(handler).classify(ITEMS, "Filmmaker")

    assert len(seen) == 1
    request = seen[0]
    assert str(request.url) == "https://llm.test/v1/messages"
    assert request.headers["x-api-key"] == "test-key"
    body = json.loads(request.content)
    assert body["model"] == "test-model"
    prompt = body["messages"][0]["content"]
    assert "Filmmaker" in prompt
    assert "a.jpg" in prompt and "Showreel" in prompt


async def test_parses_fenced_json():
    text = '```json\n[{"fileName": "a.jpg", "category": "Gallery", "tags": ["sea", 3], "description": "Coast"},' \
           ' {"fileName": "b.mp4", "category": "Featured Work", "tags": [], "description": "Reel"}]\n```'

    results = await _classifier(_reply(text)).classify(ITEMS, "Filmmaker")

    assert [r.category for r in results] == ["Gallery", "Featured Work"]
    assert results[0].tags == ["sea"]
    assert results[0].raw["fileName"] == "a.jpg"


@pytest.mark.parametrize("text", ["Sorry, I can't help with that.", '{"category": "Gallery"}', ""])
async def test_malformed_output_yields_empty_list(text):
    assert await _classifier(_reply(text)).classify(ITEMS, "Filmmaker") == []


async def test_http_error_raises_classification_error():
    classifier = _classifier(lambda request: httpx.Response(529, json={"error": {"type": "overloaded_error"}}))
    with pytest.raises(ClassificationError):
        await classifier.classify(ITEMS, "Filmmaker")


async def test_transport_error_raises_classification_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ClassificationError):
        await _classifier(handler).classify(ITEMS, "Filmmaker")


async def test_empty_batch_makes_no_call():
    def handler(request):
        raise AssertionError("no request expected")

    assert await _classifier(handler).classify([], "Filmmaker") == []


def test_bad_entries_keep_their_position():
    results = parse_classifications('[{"category": "Gallery"}, "junk", {"tags": ["x"]}, {"category": "About"}]')
    assert [r.category if r else None for r in results] == ["Gallery", None, None, "About"]


def test_requires_api_key(monkeypatch):
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", None)
    with pytest.raises(ValueError):
        AnthropicClassifier()
