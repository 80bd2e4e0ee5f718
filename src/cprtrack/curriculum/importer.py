"""
Curriculum row import.

Turns flat (module, topic, sub-topic, lecture number) rows, as they come out
of a course-plan spreadsheet, into an ordered module → topic → sub-topic tree.
Malformed rows are skipped, not rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cprtrack.core.validation import (
    ValidationError,
    validate_curriculum_name,
    validate_lecture_number,
)

logger = logging.getLogger(__name__)

# Column headers used by the course-plan spreadsheet export
SHEET_COLUMNS = {
    "module_name": "Module",
    "topic_name": "Topic",
    "sub_topic_name": "Sub Topic",
    "lecture_number": "Lecture Number",
}


@dataclass(frozen=True)
class CurriculumRow:
    """One raw row of a curriculum sheet. Fields may be missing or malformed."""

    module_name: Any
    topic_name: Any
    sub_topic_name: Any
    lecture_number: Any

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CurriculumRow:
        """Build a row from either snake_case keys or sheet column headers."""
        return cls(
            **{
                key: data.get(key, data.get(header))
                for key, header in SHEET_COLUMNS.items()
            }
        )


@dataclass
class ParsedSubTopic:
    name: str
    lecture_number: int


@dataclass
class ParsedTopic:
    name: str
    sub_topics: list[ParsedSubTopic] = field(default_factory=list)


@dataclass
class ParsedModule:
    name: str
    topics: dict[str, ParsedTopic] = field(default_factory=dict)


@dataclass
class ParsedCurriculum:
    """Curriculum tree in first-seen order, plus the count of skipped rows."""

    modules: dict[str, ParsedModule] = field(default_factory=dict)
    skipped_rows: int = 0

    @property
    def sub_topic_count(self) -> int:
        return sum(
            len(topic.sub_topics)
            for module in self.modules.values()
            for topic in module.topics.values()
        )

    @property
    def is_empty(self) -> bool:
        return not self.modules


def parse_rows(rows: Iterable[CurriculumRow | Mapping[str, Any]]) -> ParsedCurriculum:
    """Group rows into a tree.

    Modules and topics are keyed by their cleaned name, so repeated names
    continue the same node. Sub-topics keep row order. Rows missing any name
    or with a missing or non-positive lecture number are skipped.
    """
    parsed = ParsedCurriculum()

    for position, raw in enumerate(rows, start=1):
        row = raw if isinstance(raw, CurriculumRow) else CurriculumRow.from_mapping(raw)
        try:
            module_name = validate_curriculum_name(row.module_name, "Module name")
            topic_name = validate_curriculum_name(row.topic_name, "Topic name")
            sub_topic_name = validate_curriculum_name(row.sub_topic_name, "Sub-topic name")
            lecture_number = validate_lecture_number(row.lecture_number)
        except ValidationError as e:
            parsed.skipped_rows += 1
            logger.warning(f"Skipping curriculum row {position}: {e}")
            continue

        module = parsed.modules.setdefault(module_name, ParsedModule(module_name))
        topic = module.topics.setdefault(topic_name, ParsedTopic(topic_name))
        topic.sub_topics.append(ParsedSubTopic(sub_topic_name, lecture_number))

    return parsed
