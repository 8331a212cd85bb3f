"""Tests for the plain-text question parser."""

from satprep.domain.models.scoring import Difficulty
from satprep.services.question_importer import parse_question_text

SAMPLE = """
Easy:
Q1:
Plants convert sunlight into chemical energy.
Which choice best states the main idea of the text?
Choose 1 answer:
A. Plants store energy.
B. Sunlight is harmful.
C. Plants need water.
D. Energy is lost.
Correct Answer: A
Explanation: The text says plants convert sunlight
into stored chemical energy.

Hard:
Q2:
What is the value of x if 3x + 4 = 19?
Choose 1 answer:
A. 3
B. 5
C. 7
D. 15
Correct Answer: B
"""


def test_parses_every_block():
    questions = parse_question_text(SAMPLE)
    assert len(questions) == 2


def test_passage_question_and_choices():
    first = parse_question_text(SAMPLE)[0]
    assert first.difficulty == Difficulty.EASY
    assert first.passage == "Plants convert sunlight into chemical energy."
    assert first.question == "Which choice best states the main idea of the text?"
    assert first.choices == [
        "Plants store energy.",
        "Sunlight is harmful.",
        "Plants need water.",
        "Energy is lost.",
    ]
    assert first.answer == 0


def test_explanation_spans_lines():
    first = parse_question_text(SAMPLE)[0]
    assert first.explanation == (
        "The text says plants convert sunlight into stored chemical energy."
    )


def test_single_line_is_question_not_passage():
    second = parse_question_text(SAMPLE)[1]
    assert second.difficulty == Difficulty.HARD
    assert second.passage is None
    assert second.question == "What is the value of x if 3x + 4 = 19?"
    assert second.answer == 1
    assert second.explanation is None


def test_block_without_answer_is_skipped():
    text = """
Medium:
Q1:
Passage.
Question?
Choose 1 answer:
A. one
B. two
C. three
D. four
"""
    assert parse_question_text(text) == []


def test_answer_outside_choices_is_skipped():
    text = """
Medium:
Q1:
Question?
Choose 1 answer:
A. one
B. two
C. three
D. four
Correct Answer: E
"""
    assert parse_question_text(text) == []


def test_blocks_before_any_header_are_skipped():
    text = SAMPLE.replace("Easy:\n", "", 1)
    questions = parse_question_text(text)
    assert [q.difficulty for q in questions] == [Difficulty.HARD]


def test_empty_text():
    assert parse_question_text("") == []


def test_skipped_blocks_are_reported():
    text = """
Medium:
Q1:
Passage.
Question?
Choose 1 answer:
A. one
B. two
C. three
D. four

Q2:
Question?
Choose 1 answer:
A. one
B. two
C. three
D. four
Correct Answer: E
"""
    errors = []
    assert parse_question_text(text, errors=errors) == []
    assert errors == [
        "Q1 (line 3): missing correct answer",
        "Q2 (line 12): answer E is not one of the 4 choices",
    ]


def test_block_before_header_is_reported():
    errors = []
    parse_question_text(SAMPLE.replace("Easy:\n", "", 1), errors=errors)
    assert errors == ["Q1 (line 2): no difficulty header before it"]
