"""
Unit tests for course card name cleanup and course code extraction.
"""
from __future__ import annotations

from studydash.domain.canvas.names import clean_course_name, extract_course_code


def test_clean_strips_term_prefix_and_section_suffix():
    assert clean_course_name("(25FS-Full) Data Structures (001)", "") == "Data Structures"


def test_clean_falls_back_to_long_name():
    assert clean_course_name("", "Intro to Physics (002)") == "Intro to Physics"


def test_clean_keeps_plain_names():
    assert clean_course_name("CS 2028 Data Structures", "ignored") == "CS 2028 Data Structures"


def test_extract_code_from_name_with_space():
    assert extract_course_code("CS 2028 Data Structures", "") == "CS 2028"


def test_extract_code_from_name_without_space():
    assert extract_course_code("MATH1061 Calculus", "") == "MATH1061"


def test_extract_code_from_course_code_field():
    assert extract_course_code("Data Structures", "25FS_CS2028_001") == "CS2028"


def test_extract_code_unknown():
    assert extract_course_code("Data Structures", "sandbox") == "N/A"
    assert extract_course_code("", "") == "N/A"
