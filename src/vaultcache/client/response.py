"""Response formatting bridge -- maps :class:`httpx.Response` to the output system."""

from __future__ import annotations

from typing import Any

import httpx

from vaultcache.output import get_output


def format_api_response(response: httpx.Response, cache_header: str = "x-sw-cached-at") -> None:
    """Print the status line to stderr and the body to stdout.

    A response served from the API cache is flagged on the status line.

    Args:
        response: The response to display.
        cache_header: Header marking a response that came from the cache.
    """
    output = get_output()

    status = f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip()
    if cache_header in response.headers:
        status += f" (cached at {response.headers[cache_header]})"
    output.info(status)

    content_type = response.headers.get("content-type", "application/json")
    data = extract_response_data(response)
    if data is not None:
        output.format_response(data, content_type)


def extract_response_data(response: httpx.Response) -> Any:
    """Return the JSON-decoded body, the raw text if it is not JSON, or ``None`` if empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
