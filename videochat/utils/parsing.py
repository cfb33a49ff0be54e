"""Best-effort extraction of JSON from free-form oracle replies.

``parse_structured`` never raises. It returns ``Parsed`` when a JSON value
could be decoded and ``Unparsed`` (carrying the raw text) otherwise, so
callers branch on the variant instead of catching exceptions.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class Parsed:
    value: Any
    raw: str


@dataclass(frozen=True)
class Unparsed:
    raw: str


ParseResult = Union[Parsed, Unparsed]


def _fenced_block(text: str) -> Optional[str]:
    m = _FENCE_RE.search(text)
    if m:
        return m.group(1).strip()
    return None


def parse_structured(text: Optional[str]) -> ParseResult:
    raw = text or ""
    candidates = []
    block = _fenced_block(raw)
    if block:
        candidates.append(block)
    stripped = raw.strip()
    if stripped:
        candidates.append(stripped)

    for candidate in candidates:
        try:
            return Parsed(value=json.loads(candidate), raw=raw)
        except ValueError:
            continue
    return Unparsed(raw=raw)
