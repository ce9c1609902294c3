"""
Tolerant JSON extraction from model output.

Models wrap JSON in code fences, prefix it with a language tag, or surround it
with prose. These helpers strip the wrapping and bracket-scan for the first
balanced object or array.
"""

import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def clean_json_response(text: str) -> str:
    """Remove code-fence markers and a leading ``json`` tag."""
    cleaned = text.strip()

    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()

    if cleaned.lower().startswith("json\n"):
        cleaned = cleaned[5:].strip()

    return cleaned


def find_balanced(text: str, open_char: str = "{", close_char: str = "}") -> Optional[str]:
    """
    Return the first balanced ``open_char ... close_char`` span in text.

    Brackets inside JSON string literals are ignored.
    """
    start = text.find(open_char)
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == open_char:
                depth += 1
            elif char == close_char:
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unbalanced from this start; try the next opening bracket
        start = text.find(open_char, start + 1)
    return None


def _parse(text: str, open_char: str, close_char: str, expected: type) -> Any:
    if not text or not text.strip():
        raise ValueError("Empty response")

    cleaned = clean_json_response(text)

    try:
        value = json.loads(cleaned)
        if isinstance(value, expected):
            return value
    except json.JSONDecodeError:
        pass

    candidate = find_balanced(cleaned, open_char, close_char)
    if candidate is None:
        raise ValueError(f"No JSON {expected.__name__} found in response")

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in response: {e}") from e

    if not isinstance(value, expected):
        raise ValueError(f"Expected JSON {expected.__name__}, got {type(value).__name__}")
    return value


def parse_json_object(text: str) -> dict:
    """Parse the first JSON object out of model output; raise ValueError on failure."""
    return _parse(text, "{", "}", dict)


def parse_json_array(text: str) -> list:
    """Parse the first JSON array out of model output; raise ValueError on failure."""
    return _parse(text, "[", "]", list)
