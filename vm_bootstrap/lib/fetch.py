from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..errors import NetworkUnavailable

logger = logging.getLogger(__name__)

_HTML_MARKERS = ("<!doctype", "<html")


def _first_line(content: str) -> str:
    for line in content.splitlines():
        if line.strip():
            return line.strip()
    return ""


def looks_like_html(content: str) -> bool:
    return _first_line(content).lower().startswith(_HTML_MARKERS)


def looks_like_script(content: str) -> bool:
    """True for shell scripts: a shebang on the first line and no HTML."""
    lines = content.lstrip("\ufeff").splitlines()
    return bool(lines) and lines[0].startswith("#!") and not looks_like_html(content)


def looks_like_config(content: str) -> bool:
    """Best-effort check for a plain-text config file (rc files have no shebang)."""
    return bool(content.strip()) and not looks_like_html(content)


def fetch_text(url: str, *, client: Optional[httpx.Client] = None, timeout: float = 30.0) -> str:
    """GET url and return the body; any failure is NetworkUnavailable. No retries."""

    owns_client = client is None
    c = client if client is not None else httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = c.get(url)
        if not response.is_success:
            raise NetworkUnavailable(url, f"HTTP {response.status_code}")
        return response.text
    except httpx.HTTPError as e:
        raise NetworkUnavailable(url, str(e) or type(e).__name__) from e
    finally:
        if owns_client:
            c.close()


def fetch_script(url: str, *, client: Optional[httpx.Client] = None, timeout: float = 30.0) -> str:
    """Fetch an installer script; HTML error pages count as unavailable."""

    body = fetch_text(url, client=client, timeout=timeout)
    if not looks_like_script(body):
        logger.debug("Rejected content from %s: %r", url, _first_line(body)[:80])
        raise NetworkUnavailable(url, "response is not a shell script")
    return body


def fetch_latest_release_tag(api_url: str, *, client: Optional[httpx.Client] = None, timeout: float = 30.0) -> str:
    """Return tag_name from a GitHub 'latest release' API response."""

    owns_client = client is None
    c = client if client is not None else httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = c.get(api_url, headers={"Accept": "application/vnd.github+json"})
        if not response.is_success:
            raise NetworkUnavailable(api_url, f"HTTP {response.status_code}")
        data = response.json()
    except httpx.HTTPError as e:
        raise NetworkUnavailable(api_url, str(e) or type(e).__name__) from e
    except ValueError as e:
        raise NetworkUnavailable(api_url, "invalid JSON") from e
    finally:
        if owns_client:
            c.close()

    tag = data.get("tag_name") if isinstance(data, dict) else None
    if not tag:
        raise NetworkUnavailable(api_url, "no tag_name in response")
    return str(tag)
