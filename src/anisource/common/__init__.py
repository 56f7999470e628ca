from .common import (
    make_request,
    read_json,
    url_exists,
    is_not_found,
    absolute_url,
)

__all__ = [
    "make_request",
    "read_json",
    "url_exists",
    "is_not_found",
    "absolute_url",
]
