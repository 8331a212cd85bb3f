"""Tests for scoring value types."""

import dataclasses

import pytest

from satprep.core.exceptions import ValidationError
from satprep.domain.models.scoring import (
    CompositeScore,
    ModuleResult,
    ScaledScore,
    SectionType,
)


def test_module_result_valid():
    result = ModuleResult(raw_score=20, total_questions=27, section_type=SectionType.READING)
    assert result.raw_score == 20
    assert result.section_type == SectionType.READING


def test_module_result_coerces_section_string():
    result = ModuleResult(10, 22, "math")
    assert result.section_type is SectionType.MATH


def test_module_result_is_immutable():
    result = ModuleResult(10, 22, SectionType.MATH)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.raw_score = 11


@pytest.mark.parametrize(
    "raw,total",
    [
        (-1, 27),  # negative raw score
        (28, 27),  # raw above total
        (0, 0),  # empty module
        (5, -3),  # negative total
    ],
)
def test_module_result_rejects_out_of_range(raw, total):
    with pytest.raises(ValidationError):
        ModuleResult(raw, total, SectionType.READING)


@pytest.mark.parametrize("raw", [19.0, "19", True, None])
def test_module_result_rejects_non_integer_raw(raw):
    with pytest.raises(ValidationError):
        ModuleResult(raw, 27, SectionType.READING)


def test_module_result_rejects_unknown_section():
    with pytest.raises(ValidationError):
        ModuleResult(10, 27, "writing")


def test_module_result_boundaries_accepted():
    assert ModuleResult(0, 27, SectionType.READING).raw_score == 0
    assert ModuleResult(27, 27, SectionType.READING).raw_score == 27


@pytest.mark.parametrize("value", [199, 801, -5])
def test_scaled_score_range(value):
    with pytest.raises(ValidationError):
        ScaledScore(value)


def test_scaled_score_bounds_accepted():
    assert ScaledScore(200).value == 200
    assert ScaledScore(800).value == 800


@pytest.mark.parametrize("value", [399, 1601])
def test_composite_score_range(value):
    with pytest.raises(ValidationError):
        CompositeScore(value)


def test_validation_error_carries_message():
    with pytest.raises(ValidationError) as exc_info:
        ModuleResult(30, 27, SectionType.READING)
    assert "exceeds" in exc_info.value.message
