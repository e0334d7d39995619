from __future__ import annotations

import pytest

from insightforge.analysis.classifier import classify_content
from insightforge.models import ContentType


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Abstract. Introduction to the topic. Conclusion follows.", ContentType.ACADEMIC_PAPER),
        ("Ingredients: flour and eggs. Instructions: mix well.", ContentType.RECIPE),
        ("Experience at Acme, education at MIT, skills in Python.", ContentType.RESUME),
        ("user@example.com with password hunter2", ContentType.CREDENTIALS_LIST),
        ("The deadline is 2024-05-01 for everyone", ContentType.DATE_BASED),
        ("Deadline moved to 5/1/2024 for the team", ContentType.DATE_BASED),
        ("Weekly meeting agenda for the platform team", ContentType.MEETING_NOTES),
        ("\n".join(f"row{i},value" for i in range(11)), ContentType.STRUCTURED_DATA),
        ("This is the story of a small town", ContentType.NARRATIVE),
        ("Short sentence. " * 20, ContentType.NARRATIVE),
        ("Our product ships with a new price tier", ContentType.PRODUCT_INFORMATION),
        ("hello there friend how are you", ContentType.GENERAL_TEXT),
    ],
)
def test_classify_content_labels(text: str, expected: ContentType) -> None:
    assert classify_content(text) is expected


def test_academic_rule_wins_over_recipe():
    text = "Abstract: ingredients recipe study. Introduction here. Conclusion there."
    assert classify_content(text) is ContentType.ACADEMIC_PAPER


def test_credentials_rule_wins_over_date():
    text = "email: ops@example.com password: secret created 2024-01-01"
    assert classify_content(text) is ContentType.CREDENTIALS_LIST


def test_matching_is_case_insensitive_and_deterministic():
    text = "MEETING MINUTES for the quarterly review"
    assert classify_content(text) is ContentType.MEETING_NOTES
    assert classify_content(text) is classify_content(text)


def test_ten_lines_is_not_structured_data():
    text = "\n".join(f"row{i},value" for i in range(10))
    assert classify_content(text) is ContentType.GENERAL_TEXT
