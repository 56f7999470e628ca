import logging
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests

from ..config import DEFAULT_REQUEST_TIMEOUT, get_default_headers
from ..errors import UpstreamFormatChanged


def make_request(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    method: str = "GET",
    timeout: int = DEFAULT_REQUEST_TIMEOUT,
    **kwargs: Any,
) -> requests.Response:
    """Make HTTP request with error handling."""
    if headers is None:
        headers = get_default_headers()
    try:
        response = requests.request(
            method, url, headers=headers, timeout=timeout, **kwargs
        )
        response.raise_for_status()
        return response
    except requests.RequestException as err:
        logging.error("%s request failed for %s: %s", method, url, err)
        raise


def read_json(response: requests.Response, what: str) -> Any:
    """Decode a JSON body; a malformed one means the upstream payload changed."""
    try:
        return response.json()
    except ValueError as err:
        raise UpstreamFormatChanged(f"{what} returned a malformed JSON body: {err}") from err


def url_exists(url: str, headers: Optional[Dict[str, str]] = None) -> bool:
    """Lightweight existence check: a HEAD request that does not error out."""
    try:
        make_request(url, headers=headers, method="HEAD", allow_redirects=True)
        return True
    except requests.RequestException:
        return False


def is_not_found(err: Exception) -> bool:
    """True when a request failed with an HTTP 404/410 from upstream."""
    response = getattr(err, "response", None)
    return response is not None and response.status_code in (404, 410)


def absolute_url(src: str, base: str) -> str:
    """Resolve protocol-relative and root-relative embed URLs against a page."""
    if src.startswith("//"):
        return "https:" + src
    return urljoin(base, src)
