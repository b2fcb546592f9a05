import json
import logging
import re
import httpx
from profolia.core.config import settings
from profolia.core.errors import ClassificationError
from profolia.platform.ports.content_classifier import ContentClassifierPort, ClassifierItem, Classification

log = logging.getLogger("classifier.anthropic")

_FENCE = re.compile(r"```(?:json)?\n?|\n?```")

PROMPT = """Analyze these media files for a {domain}'s portfolio and categorize them:

Files: {files}

Based on the profession type and file names/types, categorize each file and suggest:
1. A category (e.g., "Featured Work", "Projects", "Gallery", "About", etc.)
2. Relevant tags
3. A brief description of what this might be

Return a JSON array with one object per file, in the same order as the files above:
[
  {{
    "fileName": "example.jpg",
    "category": "Featured Work",
    "tags": ["tag1", "tag2"],
    "description": "Brief description"
  }}
]

Return ONLY valid JSON, nothing else."""


def parse_classifications(text: str) -> list[Classification | None]:
    """Turn the model's text reply into positional classifications.

    Anything that is not a JSON array yields []; array members that are not
    objects with a string category become None.
    """
    cleaned = _FENCE.sub("", text or "").strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        log.warning(f"Classifier returned non-JSON output ({len(cleaned)} chars)")
        return []
    if not isinstance(data, list):
        log.warning(f"Classifier returned {type(data).__name__}, expected a list")
        return []

    out: list[Classification | None] = []
    for entry in data:
        if not isinstance(entry, dict) or not isinstance(entry.get("category"), str) or not entry["category"].strip():
            out.append(None)
            continue
        tags = entry.get("tags")
        description = entry.get("description")
        out.append(Classification(
            category=entry["category"].strip(),
            tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else [],
            description=description if isinstance(description, str) else "",
            raw=entry,
        ))
    return out


class AnthropicClassifier(ContentClassifierPort):
    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key or settings.ANTHROPIC_API_KEY
        if not self.api_key:
            raise ValueError("Anthropic API key is required for AnthropicClassifier")
        self.model = model or settings.ANTHROPIC_MODEL
        self.api_url = f"{(base_url or settings.ANTHROPIC_BASE_URL).rstrip('/')}/v1/messages"
        self.max_tokens = max_tokens or settings.CLASSIFIER_MAX_TOKENS
        self.timeout = timeout or settings.CLASSIFIER_TIMEOUT_SECONDS
        self._client = client

    def _payload(self, items: list[ClassifierItem], domain_hint: str) -> dict:
        files = [
            {"fileName": i.file_name, "fileType": i.kind, **({"description": i.description} if i.description else {})}
            for i in items
        ]
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{
                "role": "user",
                "content": PROMPT.format(domain=domain_hint or "professional", files=json.dumps(files, indent=2)),
            }],
        }

    async def _post(self, payload: dict) -> httpx.Response:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }
        if self._client is not None:
            return await self._client.post(self.api_url, headers=headers, json=payload, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.api_url, headers=headers, json=payload)

    async def classify(self, items: list[ClassifierItem], domain_hint: str) -> list[Classification | None]:
        if not items:
            return []
        try:
            response = await self._post(self._payload(items, domain_hint))
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise ClassificationError(f"Classifier returned HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise ClassificationError(f"Classifier request failed: {e}")
        except ValueError:
            log.warning("Classifier response body was not JSON")
            return []

        blocks = body.get("content") if isinstance(body, dict) else None
        text = next(
            (b.get("text") for b in blocks or [] if isinstance(b, dict) and b.get("type") == "text"),
            None,
        )
        if not text:
            log.warning("Classifier response had no text content")
            return []
        results = parse_classifications(text)
        log.debug(f"Classified {len(results)}/{len(items)} items for domain={domain_hint!r}")
        return results
