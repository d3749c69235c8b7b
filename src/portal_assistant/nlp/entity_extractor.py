from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from portal_assistant.data_models import Course

_WORD_RE = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class CourseMatch:
    course: Course
    match_type: str
    matched_text: str


class CourseResolver:
    """
    Finds the course an utterance refers to.

    Passes run in a fixed order over the whole course list: title substring,
    then code substring, then any title word longer than ``min_word_length``.
    The first course hit by the earliest pass wins; there is no scoring, so
    titles sharing long words resolve to whichever course is listed first.
    """

    MATCH_TITLE = "title"
    MATCH_CODE = "code"
    MATCH_WORD = "word"

    def __init__(self, min_word_length: int = 4) -> None:
        self.min_word_length = min_word_length

    def resolve(self, query: str, courses: Sequence[Course]) -> CourseMatch | None:
        lowered = query.lower()

        for course in courses:
            title = course.title.lower().strip()
            if title and title in lowered:
                return CourseMatch(course=course, match_type=self.MATCH_TITLE, matched_text=title)

        for course in courses:
            code = course.code.lower().strip()
            if code and code in lowered:
                return CourseMatch(course=course, match_type=self.MATCH_CODE, matched_text=code)

        for course in courses:
            for word in _WORD_RE.findall(course.title.lower()):
                if len(word) > self.min_word_length and word in lowered:
                    return CourseMatch(course=course, match_type=self.MATCH_WORD, matched_text=word)

        return None

    def resolve_course(self, query: str, courses: Sequence[Course]) -> Course | None:
        match = self.resolve(query, courses)
        return match.course if match else None
