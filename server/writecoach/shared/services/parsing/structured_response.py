"""
Parsing of AI text into validated structured payloads.

Models are asked for a bare JSON object but often wrap it in markdown, cut it
short or write JavaScript-style literals. Recovery is a fixed, ordered list of
normalization passes. Passes are applied cumulatively and a parse is attempted
after each one; the first candidate that decodes to a JSON object wins.
"""

import json
import re
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from ...core.exceptions import ResponseParseError
from ...utils.security import sanitize_prompt_for_logging


T = TypeVar("T", bound=BaseModel)

FENCE_PATTERN = re.compile(r"```[a-zA-Z]*[ \t]*\n?")
TRAILING_COMMA_PATTERN = re.compile(r",\s*([}\]])")
BARE_KEY_PATTERN = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_\-]*)(\s*:)")


def _split_strings(text: str) -> List[Tuple[bool, str]]:
    """
    Split text into (is_string, segment) runs on double-quoted JSON strings.
    An unterminated string runs to the end of the text.
    """
    segments: List[Tuple[bool, str]] = []
    buffer: List[str] = []
    in_string = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_string:
            buffer.append(ch)
            if ch == "\\" and i + 1 < len(text):
                buffer.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                segments.append((True, "".join(buffer)))
                buffer = []
                in_string = False
        elif ch == '"':
            if buffer:
                segments.append((False, "".join(buffer)))
            buffer = [ch]
            in_string = True
        else:
            buffer.append(ch)
        i += 1
    if buffer:
        segments.append((in_string, "".join(buffer)))
    return segments


def _outside_strings(text: str, transform: Callable[[str], str]) -> str:
    return "".join(segment if is_string else transform(segment) for is_string, segment in _split_strings(text))


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` fence markers."""
    return FENCE_PATTERN.sub("", text).strip()


def extract_outer_braces(text: str) -> str:
    """Keep the first '{' through the last '}' (or through the end if never closed)."""
    start = text.find("{")
    if start == -1:
        return text
    end = text.rfind("}")
    if end < start:
        return text[start:]
    return text[start:end + 1]


def balance_braces(text: str) -> str:
    """Append the '}' characters needed to close every open object."""
    depth = 0
    for is_string, segment in _split_strings(text):
        if is_string:
            continue
        depth += segment.count("{") - segment.count("}")
    if depth > 0:
        return text + "}" * depth
    return text


def remove_trailing_commas(text: str) -> str:
    """Drop commas directly before '}' or ']'."""
    return _outside_strings(text, lambda segment: TRAILING_COMMA_PATTERN.sub(r"\1", segment))


def quote_bare_keys(text: str) -> str:
    """Quote identifier keys: {accuracy: 90} -> {"accuracy": 90}."""
    return _outside_strings(text, lambda segment: BARE_KEY_PATTERN.sub(r'\1"\2"\3', segment))


def _closes_single_quoted(text: str, index: int) -> bool:
    rest = text[index:].lstrip()
    return not rest or rest[0] in ":,}]"


def normalize_quotes(text: str) -> str:
    """
    Rewrite single-quoted strings as double-quoted ones.
    A quote only closes a string when followed by ':', ',', '}' or ']',
    so apostrophes inside words survive.
    """
    out: List[str] = []
    in_double = False
    in_single = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_double:
            out.append(ch)
            if ch == "\\" and i + 1 < len(text):
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_double = False
        elif in_single:
            if ch == "\\" and i + 1 < len(text):
                out.append(text[i:i + 2])
                i += 2
                continue
            if ch == "'" and _closes_single_quoted(text, i + 1):
                out.append('"')
                in_single = False
            elif ch == '"':
                out.append('\\"')
            else:
                out.append(ch)
        elif ch == '"':
            in_double = True
            out.append(ch)
        elif ch == "'":
            in_single = True
            out.append('"')
        else:
            out.append(ch)
        i += 1
    return "".join(out)


REPAIR_PASSES: List[Tuple[str, Callable[[str], str]]] = [
    ("strip_code_fences", strip_code_fences),
    ("extract_outer_braces", extract_outer_braces),
    ("balance_braces", balance_braces),
    ("remove_trailing_commas", remove_trailing_commas),
    ("quote_bare_keys", quote_bare_keys),
    ("normalize_quotes", normalize_quotes),
]


def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(candidate, strict=False)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def repair_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Decode the JSON object in AI text, repairing it if needed.

    Returns:
        The decoded object, or None when no pass produces one
    """
    if not text or not text.strip():
        return None

    candidate = text.strip()
    data = _loads_object(candidate)
    if data is not None:
        return data

    for name, repair in REPAIR_PASSES:
        candidate = repair(candidate)
        data = _loads_object(candidate)
        if data is not None:
            logger.debug(f"AI response parsed after repair pass '{name}'")
            return data

    return None


def parse_structured(text: Optional[str], schema: Type[T]) -> T:
    """
    Parse AI text into a validated schema instance.

    Args:
        text: Raw provider text
        schema: Pydantic model the payload must satisfy

    Returns:
        Validated schema instance

    Raises:
        ResponseParseError: If no JSON object can be recovered or it fails validation
    """
    data = repair_json_object(text)
    if data is None:
        logger.error(f"AI response is not JSON after all repair passes: {sanitize_prompt_for_logging(text or '', 300)}")
        raise ResponseParseError("AI response could not be parsed as JSON", raw_response=text)

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f"AI response failed {schema.__name__} validation: {e.error_count()} error(s)")
        raise ResponseParseError(
            f"AI response does not match the expected {schema.__name__} structure",
            raw_response=text,
        ) from e
