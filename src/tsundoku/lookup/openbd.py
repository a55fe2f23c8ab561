"""Book metadata lookup by ISBN via the openBD API."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx

from tsundoku.library.characters import DEFAULT_GENRE
from tsundoku.library.models import BookInfo

log = logging.getLogger(__name__)

_ISBN_RE = re.compile(r"^(\d{9}[\dXx]|\d{13})$")
PAGE_COUNT_EXTENT = "11"


def normalize_isbn(raw: str) -> Optional[str]:
    """Strip hyphens and spaces; return the ISBN if it is 10 or 13 digits."""
    cleaned = re.sub(r"[-\s]", "", raw or "")
    if not _ISBN_RE.match(cleaned):
        return None
    return cleaned.upper()


def _guess_genre(subjects: list[dict[str, Any]]) -> str:
    # NDC classification of the first coded subject
    for subject in subjects:
        if not isinstance(subject, dict):
            continue
        code = str(subject.get("SubjectCode") or "")
        if not code:
            continue
        if code.startswith(("0", "1")):
            return "philosophy"
        if code.startswith("4"):
            return "novel"
        if code.startswith(("5", "6")):
            return "study"
        break
    return DEFAULT_GENRE


def _page_count(extents: list[dict[str, Any]]) -> int:
    for extent in extents:
        if not isinstance(extent, dict):
            continue
        if extent.get("ExtentType") != PAGE_COUNT_EXTENT:
            continue
        try:
            pages = int(extent.get("ExtentValue") or 0)
        except ValueError:
            continue
        if pages > 0:
            return pages
    return 0


def _cover(record: dict[str, Any]) -> Optional[str]:
    cover = (record.get("summary") or {}).get("cover")
    if cover:
        return cover
    try:
        resources = record["onix"]["CollateralDetail"]["SupportingResource"]
        return resources[0]["ResourceContent"][0]["ResourceVersion"][0][
            "ResourceLink"
        ] or None
    except (KeyError, IndexError, TypeError):
        return None


def parse_openbd_record(
    record: Optional[dict[str, Any]], isbn: Optional[str] = None
) -> Optional[BookInfo]:
    """Extract what we can from one openBD record. None if there is no title."""
    if not isinstance(record, dict):
        return None
    detail = (record.get("onix") or {}).get("DescriptiveDetail") or {}
    title_text = (
        ((detail.get("TitleDetail") or {}).get("TitleElement") or {}).get("TitleText")
        or {}
    )
    if not isinstance(title_text, dict):
        title_text = {}
    title = title_text.get("content") or (record.get("summary") or {}).get("title") or ""
    if not title:
        return None

    return BookInfo(
        title=title,
        genre=_guess_genre(detail.get("Subject") or []),
        total_page=_page_count(detail.get("Extent") or []),
        cover_image=_cover(record),
        isbn=isbn,
    )


class OpenBDClient:
    def __init__(self, base_url: str = "https://api.openbd.jp/v1", timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def fetch(self, isbn: str) -> Optional[BookInfo]:
        """Look up an ISBN. Returns None when not found or on any failure."""
        cleaned = normalize_isbn(isbn)
        if cleaned is None:
            log.warning("Invalid ISBN: %r", isbn)
            return None

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)

        try:
            resp = await self._client.get(
                f"{self._base_url}/get", params={"isbn": cleaned}
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            log.warning("openBD API error: %s", e.response.status_code)
            return None
        except httpx.RequestError as e:
            log.warning("openBD request error: %s -> %s", type(e).__name__, e)
            return None
        except ValueError as e:
            log.warning("openBD returned invalid JSON: %s", e)
            return None

        if not isinstance(data, list) or not data:
            return None
        try:
            return parse_openbd_record(data[0], isbn=cleaned)
        except (AttributeError, TypeError) as e:
            log.warning("openBD returned an unexpected record shape: %s", e)
            return None

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
