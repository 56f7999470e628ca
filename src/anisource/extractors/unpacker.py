"""
Decoder for scripts packed with Dean Edwards' P.A.C.K.E.R.

Player pages of several hosts ship their source manifest as

    eval(function(p,a,c,k,e,d){...}('payload',radix,count,'w0|w1|...'.split('|'),0,{}))

The packer replaces every word of ``payload`` that spells an index below
``count`` in its own base-``radix`` notation with the keyword at that index.
This module rebuilds that notation and substitutes the words as plain string
work. Nothing is ever evaluated.
"""

import re
from typing import Dict, List, Tuple

_PACKED_RE = re.compile(
    r"eval\(function\(p,a,c,k,e,[dr]\).*?\}\s*\(\s*"
    r"'(?P<payload>(?:\\.|[^'\\])*)'\s*,\s*"
    r"(?P<radix>\d+|\[\])\s*,\s*"
    r"(?P<count>\d+)\s*,\s*"
    r"'(?P<keywords>(?:\\.|[^'\\])*)'\.split\('\|'\)",
    re.S,
)

_WORD_RE = re.compile(r"\b\w+\b", re.ASCII)


class UnpackError(ValueError):
    """The text does not contain a packed script this decoder understands."""


def detect(text: str) -> bool:
    """True when ``text`` contains a packed ``eval(function(p,a,c,k,e,d)`` blob."""
    return bool(text) and _PACKED_RE.search(text) is not None


def encode_index(index: int, radix: int) -> str:
    """The packer's word for ``index``: digits, then a-z, then A-Z and beyond."""
    prefix = "" if index < radix else encode_index(index // radix, radix)
    index %= radix
    if index > 35:
        return prefix + chr(index + 29)
    return prefix + "0123456789abcdefghijklmnopqrstuvwxyz"[index]


def _unescape(text: str) -> str:
    return text.replace("\\'", "'").replace('\\"', '"').replace("\\\\", "\\")


def _parse_arguments(text: str) -> Tuple[str, int, int, List[str]]:
    match = _PACKED_RE.search(text)
    if match is None:
        raise UnpackError("No packed script found")

    radix_text = match.group("radix")
    # Some packers emit [] for the radix, which JavaScript coerces to 62
    radix = 62 if radix_text == "[]" else int(radix_text)
    count = int(match.group("count"))
    keywords = _unescape(match.group("keywords")).split("|")
    if radix < 2:
        raise UnpackError(f"Unsupported radix {radix}")
    if count > len(keywords):
        raise UnpackError(f"Keyword table too short ({len(keywords)} < {count})")

    return _unescape(match.group("payload")), radix, count, keywords


def unpack(text: str) -> str:
    """
    Decode the first packed script found in ``text``.

    Raises:
        UnpackError: If no packed script is present or its arguments are malformed.
    """
    payload, radix, count, keywords = _parse_arguments(text)

    table: Dict[str, str] = {}
    for index in range(count):
        if keywords[index]:
            table[encode_index(index, radix)] = keywords[index]

    return _WORD_RE.sub(lambda word: table.get(word.group(0), word.group(0)), payload)
