"""Media bookkeeping for image/video questions.

Uploaded media lives on a third-party asset host.  When a form is saved
or deleted, URLs that the new page set no longer references are deleted
through a :class:`canova_flow.interfaces.MediaStore`.  The helpers here
only compute *which* URLs; deletion is best-effort and never blocks a save.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from canova_flow.constants import MEDIA_HOST_MARKER, MEDIA_QUESTION_TYPES
from canova_flow.interfaces import MediaStore
from canova_flow.models.form import Page

logger = logging.getLogger(__name__)

# ".../upload/v1712345678/form-media/images/abc123.jpg" -> "form-media/images/abc123"
_PUBLIC_ID_RE = re.compile(r"/v\d+/(.+)\.[^./]+$")


def collect_media_urls(pages: Iterable[Page]) -> list[str]:
    """Hosted media URLs referenced by image/video questions, in page order."""
    urls: dict[str, None] = {}
    for page in pages:
        for question in page.questions:
            url = question.media_url
            if (
                question.type in MEDIA_QUESTION_TYPES
                and isinstance(url, str)
                and MEDIA_HOST_MARKER in url
            ):
                urls[url] = None
    return list(urls)


def unused_media_urls(old_pages: Iterable[Page], new_pages: Iterable[Page]) -> list[str]:
    """URLs referenced by *old_pages* but no longer by *new_pages*."""
    keep = set(collect_media_urls(new_pages))
    return [url for url in collect_media_urls(old_pages) if url not in keep]


def extract_public_id(url: str | None) -> str | None:
    """Asset-host public id of *url*, or ``None`` if it does not parse."""
    if not url:
        return None
    match = _PUBLIC_ID_RE.search(url)
    return match.group(1) if match else None


def resource_type_for(url: str) -> str:
    return "video" if "/video/" in url else "image"


async def delete_unused_media(
    store: MediaStore | None,
    old_pages: Iterable[Page],
    new_pages: Iterable[Page],
) -> list[str]:
    """Delete media dropped between two page sets; return the deleted ids.

    Individual failures are logged and skipped so a flaky asset host never
    fails the surrounding save.
    """
    if store is None:
        return []

    deleted: list[str] = []
    for url in unused_media_urls(old_pages, new_pages):
        public_id = extract_public_id(url)
        if public_id is None:
            logger.warning("Cannot derive public id from media URL: %s", url)
            continue
        try:
            await store.delete(public_id, resource_type_for(url))
        except Exception:
            logger.exception("Error deleting media %s", url)
            continue
        logger.info("Deleted unused media: %s", public_id)
        deleted.append(public_id)
    return deleted
