"""Shared helpers: JSON parsing for model output, provider retry and per-user locks."""

from casual_creator.utils.json_parsing import (
    clean_json_response,
    find_balanced,
    parse_json_array,
    parse_json_object,
)
from casual_creator.utils.locks import UserLockRegistry
from casual_creator.utils.retry import with_retry

__all__ = [
    "clean_json_response",
    "find_balanced",
    "parse_json_array",
    "parse_json_object",
    "UserLockRegistry",
    "with_retry",
]
