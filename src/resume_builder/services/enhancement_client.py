"""Client side of text enhancement.

Sends a field's text to the enhancement endpoint and writes the rewritten
text back into the form store. The client never raises for transport or
server problems: failures are logged and leave the store untouched.

Each target (``about``, or a section plus item index) remembers the token of
its latest request. Only that request may write its response; older
responses that arrive late are discarded. Removing an entry from a section
shifts the indexes after it, so it also invalidates every request still in
flight for that section.
"""

from __future__ import annotations

import itertools
import logging
import os

import httpx

from resume_builder.models import ResumeDocument
from resume_builder.services.form_store import FormStateStore
from resume_builder.services.results import OperationResult

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_ENDPOINT_URL",
    "ENHANCEABLE_SECTIONS",
    "EnhancementClient",
]

DEFAULT_ENDPOINT_URL = "http://127.0.0.1:8000/api/enhance"

# List sections whose items have an enhanceable ``description``.
ENHANCEABLE_SECTIONS = ("experience", "projects")

Target = tuple[str, int | None]


class EnhancementClient:
    """Calls ``POST /api/enhance`` and applies the result to the store.

    Args:
        store: Form store the enhanced text is written to.
        endpoint_url: Endpoint URL; defaults to ``RESUME_BUILDER_API_URL``.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests pass a mock transport).
    """

    def __init__(
        self,
        store: FormStateStore,
        endpoint_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.store = store
        self.endpoint_url = endpoint_url or os.environ.get(
            "RESUME_BUILDER_API_URL", DEFAULT_ENDPOINT_URL
        )
        self.timeout = timeout
        self._transport = transport
        self._tokens: dict[Target, int] = {}
        self._counter = itertools.count(1)
        self._lengths = _section_lengths(store.get())
        self._unsubscribe = store.subscribe(self._on_document_changed)

    async def enhance(
        self, field: str, text: str | None, index: int | None = None
    ) -> OperationResult[str]:
        """Enhance *text* and write it to *field* (or item *index* of it).

        Raises:
            ValueError: If *field*/*index* do not name an enhanceable target.
        """
        target = _target(field, index)
        if not text or not text.strip():
            return OperationResult.skip("No text to enhance")

        token = next(self._counter)
        self._tokens[target] = token

        try:
            enhanced = await self._request(field, text)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Enhancement request for %s failed: %s", field, type(exc).__name__)
            return OperationResult.failure("Enhancement request failed")
        except ValueError as exc:
            logger.warning("Enhancement response for %s was unusable: %s", field, exc)
            return OperationResult.failure("Malformed enhancement response")

        if self._tokens.get(target) != token:
            logger.debug("Discarding stale enhancement for %s", target)
            return OperationResult.skip("Superseded by a newer request")

        return self._apply(target, enhanced)

    async def enhance_about(self) -> OperationResult[str]:
        return await self.enhance("about", self.store.get().about)

    async def enhance_description(self, section: str, index: int) -> OperationResult[str]:
        _target(section, index)
        items = getattr(self.store.get(), section)
        if not 0 <= index < len(items):
            return OperationResult.failure(f"No {section} entry at index {index}")
        return await self.enhance(section, items[index].description, index)

    def close(self) -> None:
        """Stop watching the store."""
        self._unsubscribe()

    def _on_document_changed(self, doc: ResumeDocument) -> None:
        lengths = _section_lengths(doc)
        for section, length in lengths.items():
            if length < self._lengths.get(section, 0):
                self._forget_section(section)
        self._lengths = lengths

    def _forget_section(self, section: str) -> None:
        stale = [target for target in self._tokens if target[0] == section]
        for target in stale:
            del self._tokens[target]
        if stale:
            logger.debug("Dropped %d in-flight %s enhancement(s)", len(stale), section)

    async def _request(self, field: str, text: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.endpoint_url, json={"field": field, "text": text})

        if response.status_code != httpx.codes.OK:
            try:
                error_body = response.json()
            except ValueError:
                error_body = None
            detail = error_body.get("error", "") if isinstance(error_body, dict) else ""
            raise httpx.HTTPStatusError(
                f"{response.status_code} {detail}".strip(),
                request=response.request,
                response=response,
            )

        body = response.json()
        enhanced = body.get("enhanced") if isinstance(body, dict) else None
        if not isinstance(enhanced, str) or not enhanced.strip():
            raise ValueError("missing 'enhanced' text")
        return enhanced.strip()

    def _apply(self, target: Target, enhanced: str) -> OperationResult[str]:
        field, index = target
        if index is None:
            result = self.store.set(about=enhanced)
        else:
            items = list(getattr(self.store.get(), field))
            if not 0 <= index < len(items):
                logger.warning("%s entry %d disappeared before enhancement finished", field, index)
                return OperationResult.failure(f"No {field} entry at index {index}")
            items[index] = items[index].model_copy(update={"description": enhanced})
            result = self.store.set(**{field: items})

        if result.failed:
            # The in-memory document holds the text; only persistence failed.
            logger.warning("Enhanced text applied but not saved: %s", result.error)
        return OperationResult.success(enhanced)


def _target(field: str, index: int | None) -> Target:
    if field == "about" and index is None:
        return (field, None)
    if field in ENHANCEABLE_SECTIONS and index is not None:
        return (field, index)
    raise ValueError(f"Cannot enhance field {field!r} with index {index!r}")


def _section_lengths(doc: ResumeDocument) -> dict[str, int]:
    return {section: len(getattr(doc, section)) for section in ENHANCEABLE_SECTIONS}
