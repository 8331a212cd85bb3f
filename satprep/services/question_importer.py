"""
Plain-text question bank importer.

Input format:

    Easy:
    Q1:
    <passage line>
    <question line(s)>
    Choose 1 answer:
    A. ...
    B. ...
    C. ...
    D. ...
    Correct Answer: B
    Explanation: ...

Difficulty headers (`Easy:`, `Medium:`, `Hard:`) apply to every following
block until the next header. Blocks that are missing a question, choices or
answer are skipped and reported.
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from satprep.domain.models.question import Question
from satprep.domain.models.scoring import Difficulty
from satprep.persistence.repositories.question_repo import QuestionRepository

log = structlog.get_logger(__name__)

QUESTION_START = re.compile(r"^Q\d+:")
CHOICE_LINE = re.compile(r"^([A-D])\.\s*(.*)$")
DIFFICULTY_HEADERS = {f"{d.value}:": d for d in Difficulty}
CHOOSE_MARKER = "Choose 1 answer:"
MIN_BLOCK_LINES = 8


@dataclass
class ParsedQuestion:
    difficulty: Difficulty
    passage: Optional[str]
    question: str
    choices: List[str]
    answer: int
    explanation: Optional[str]


@dataclass
class ImportReport:
    success: int = 0
    errors: List[str] = field(default_factory=list)


class MalformedBlock(ValueError):
    """A question block that cannot be parsed."""


def parse_question_text(
    text: str, errors: Optional[List[str]] = None
) -> List[ParsedQuestion]:
    """Parse a plain-text bank into questions, skipping malformed blocks.

    When `errors` is given, one message per skipped block is appended to it,
    naming the block and the line it starts on.
    """
    parsed: List[ParsedQuestion] = []
    difficulty: Optional[Difficulty] = None
    block: List[str] = []
    block_start = 0
    block_difficulty: Optional[Difficulty] = None

    def flush():
        if not block:
            return
        label = f"{block[0].rstrip(':')} (line {block_start})"
        try:
            if block_difficulty is None:
                raise MalformedBlock("no difficulty header before it")
            parsed.append(_parse_block(block, block_difficulty))
        except MalformedBlock as e:
            log.warning("question_block_skipped", block=label, reason=str(e))
            if errors is not None:
                errors.append(f"{label}: {e}")

    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if line in DIFFICULTY_HEADERS:
            difficulty = DIFFICULTY_HEADERS[line]
            continue
        if QUESTION_START.match(line):
            flush()
            block = [line]
            block_start = number
            block_difficulty = difficulty
        elif block and line:
            block.append(line)

    flush()
    return parsed


def _parse_block(lines: List[str], difficulty: Difficulty) -> ParsedQuestion:
    if len(lines) < MIN_BLOCK_LINES:
        raise MalformedBlock(f"incomplete block ({len(lines)} lines)")

    i = 1  # skip "Q<n>:"
    passage = None
    if i < len(lines) and CHOOSE_MARKER not in lines[i]:
        passage = lines[i]
        i += 1

    question_parts: List[str] = []
    while i < len(lines) and CHOOSE_MARKER not in lines[i]:
        question_parts.append(lines[i])
        i += 1
    i += 1  # skip marker

    # a single line before the marker is the question, not a passage
    if not question_parts and passage:
        question_parts, passage = [passage], None

    choices: List[str] = []
    while i < len(lines):
        match = CHOICE_LINE.match(lines[i])
        if not match:
            break
        choices.append(match.group(2).strip())
        i += 1

    answer = None
    explanation = None
    for j in range(i, len(lines)):
        if "Correct Answer:" in lines[j]:
            letter = lines[j].split("Correct Answer:", 1)[1].strip()[:1].upper()
            if letter:
                answer = ord(letter) - ord("A")
        elif "Explanation:" in lines[j]:
            explanation = " ".join(
                [lines[j].split("Explanation:", 1)[1].strip()]
                + [l for l in lines[j + 1:] if not CHOICE_LINE.match(l)]
            ).strip()
            break

    if not question_parts:
        raise MalformedBlock("missing question text")
    if not choices:
        raise MalformedBlock("missing choices")
    if answer is None:
        raise MalformedBlock("missing correct answer")
    if not 0 <= answer < len(choices):
        raise MalformedBlock(
            f"answer {chr(ord('A') + answer)} is not one of the {len(choices)} choices"
        )

    return ParsedQuestion(
        difficulty=difficulty,
        passage=passage,
        question=" ".join(question_parts),
        choices=choices,
        answer=answer,
        explanation=explanation or None,
    )


class QuestionImporter:
    """Imports parsed questions into an existing domain/subunit."""

    def __init__(self, question_repo: QuestionRepository):
        self.question_repo = question_repo

    async def import_text(
        self, text: str, domain_name: str, subunit_name: str
    ) -> ImportReport:
        report = ImportReport()

        subunit = await self.question_repo.find_subunit(domain_name, subunit_name)
        if subunit is None:
            report.errors.append(
                f'Subunit "{subunit_name}" not found in domain "{domain_name}"'
            )
            return report

        for parsed in parse_question_text(text, errors=report.errors):
            try:
                question = Question(
                    id=str(uuid.uuid4()),
                    domain_id=subunit.domain_id,
                    subunit_id=subunit.id,
                    difficulty=parsed.difficulty,
                    question_text=parsed.question,
                    choices=parsed.choices,
                    answer=parsed.answer,
                    explanation=parsed.explanation,
                    passage_text=parsed.passage,
                )
            except PydanticValidationError as e:
                report.errors.append(f"Invalid question '{parsed.question[:40]}': {e}")
                continue
            await self.question_repo.add_question(question)
            report.success += 1

        log.info(
            "questions_imported",
            domain=domain_name,
            subunit=subunit_name,
            success=report.success,
            errors=len(report.errors),
        )
        return report
