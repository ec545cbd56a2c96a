"""Course card naming helpers (display name cleanup, course code extraction)."""
from __future__ import annotations

import re

from studydash.constants import UNKNOWN_COURSE_CODE

_TERM_PREFIX = re.compile(r"^\([^)]*\)\s*")  # "(25FS-Full) "
_SECTION_SUFFIX = re.compile(r"\s*\(\d+\)\s*$")  # " (001)"
_CODE_IN_NAME = re.compile(r"([A-Z]{2,6}\s?\d{4})")
_CODE_IN_FIELD = re.compile(r"([A-Z]{2,6}\d{4})")


def clean_course_name(short_name: str, long_name: str) -> str:
    name = short_name or long_name or ""
    name = _TERM_PREFIX.sub("", name)
    name = _SECTION_SUFFIX.sub("", name)
    return name.strip()


def extract_course_code(course_name: str, course_code: str) -> str:
    """
    Find a code like 'CS 2028' in the course name, else in the second
    underscore-separated part of the Canvas courseCode field.
    """
    match = _CODE_IN_NAME.search(course_name or "")
    if match:
        return match.group(1)

    parts = (course_code or "").split("_")
    if len(parts) > 1:
        match = _CODE_IN_FIELD.search(parts[1])
        if match:
            return match.group(1)

    return UNKNOWN_COURSE_CODE
