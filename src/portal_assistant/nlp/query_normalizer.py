from __future__ import annotations

import re
from dataclasses import asdict, dataclass

from rapidfuzz import fuzz, process
from spellchecker import SpellChecker

from portal_assistant.data_models import ContextSnapshot

# Letters-only words; "CS301" or "2026-10-24" are never split apart.
_WORD_RE = re.compile(r"\b[A-Za-z]+(?:'[A-Za-z]+)?\b")
_VOCAB_RE = re.compile(r"[a-z]{3,}")


@dataclass
class NormalizedQuery:
    original: str
    corrected: str
    applied: bool
    changes: list[dict[str, str]]

    def to_dict(self) -> dict[str, str | bool | list[dict[str, str]]]:
        return asdict(self)


class QueryNormalizer:
    SHORTCUTS = {
        "whr": "where",
        "wen": "when",
        "wut": "what",
        "plz": "please",
        "pls": "please",
        "tmrw": "tomorrow",
        "tmr": "tomorrow",
        "tdy": "today",
        "sched": "schedule",
        "calender": "calendar",
        "dline": "deadline",
        "assgn": "assignment",
        "asgmt": "assignment",
        "annc": "announcement",
        "sem": "semester",
        "prof": "professor",
        "thx": "thanks",
        "ty": "thank you",
    }

    DOMAIN_TERMS = {
        "portal",
        "course",
        "courses",
        "subject",
        "subjects",
        "class",
        "classes",
        "semester",
        "enrolled",
        "grade",
        "grades",
        "marks",
        "score",
        "result",
        "results",
        "performance",
        "progress",
        "event",
        "events",
        "schedule",
        "deadline",
        "deadlines",
        "today",
        "tomorrow",
        "exam",
        "exams",
        "quiz",
        "assignment",
        "assignments",
        "announcement",
        "announcements",
        "notification",
        "notifications",
        "notes",
        "search",
        "profile",
        "ongoing",
        "completed",
        "upcoming",
        "unread",
    }

    def __init__(self, spell_correction: bool = False) -> None:
        self.spell_correction = spell_correction
        self.known_terms = frozenset(self.DOMAIN_TERMS)
        self.spellchecker: SpellChecker | None = None
        if spell_correction:
            self.spellchecker = SpellChecker(distance=2)
            self.spellchecker.word_frequency.load_words(self.known_terms)
        self._shortcut_re = re.compile(
            r"\b(" + "|".join(re.escape(key) for key in self.SHORTCUTS) + r")\b",
            re.IGNORECASE,
        )

    def normalize(self, query: str, vocabulary: frozenset[str] = frozenset()) -> NormalizedQuery:
        """
        Collapse whitespace and expand shorthand; with spell correction on,
        also fix misspelled words.

        ``vocabulary`` holds words from the caller's own portal data (see
        ``snapshot_vocabulary``). It is used for this call only, so one
        normalizer can be shared between students.
        """
        original = " ".join(query.strip().split())
        if not original:
            return NormalizedQuery(original=query, corrected=query, applied=False, changes=[])

        if self.spellchecker is None:
            return self._expand_shortcuts(original)
        return self._correct_words(original, vocabulary)

    def _expand_shortcuts(self, original: str) -> NormalizedQuery:
        changes: list[dict[str, str]] = []

        def repl(match: re.Match[str]) -> str:
            token = match.group(0)
            replacement = _match_case(token, self.SHORTCUTS[token.lower()])
            changes.append({"from": token, "to": replacement})
            return replacement

        corrected = self._shortcut_re.sub(repl, original)
        return NormalizedQuery(original=original, corrected=corrected, applied=bool(changes), changes=changes)

    def _correct_words(self, original: str, vocabulary: frozenset[str]) -> NormalizedQuery:
        changes: list[dict[str, str]] = []

        def repl(match: re.Match[str]) -> str:
            token = match.group(0)
            replacement = self._correct_word(token, vocabulary)
            if replacement != token:
                changes.append({"from": token, "to": replacement})
            return replacement

        # Only letter words are rewritten; digits, codes and punctuation stay as typed.
        corrected = _WORD_RE.sub(repl, original)
        return NormalizedQuery(original=original, corrected=corrected, applied=bool(changes), changes=changes)

    def _correct_word(self, token: str, vocabulary: frozenset[str]) -> str:
        assert self.spellchecker is not None
        lowered = token.lower()

        if lowered in self.SHORTCUTS:
            return _match_case(token, self.SHORTCUTS[lowered])
        if len(lowered) <= 3 or "'" in lowered:
            return token
        if lowered in self.known_terms or lowered in vocabulary or lowered in self.spellchecker:
            return token

        if vocabulary:
            hit = process.extractOne(lowered, sorted(vocabulary), scorer=fuzz.ratio, score_cutoff=85)
            if hit is not None:
                return _match_case(token, hit[0])

        candidate = self.spellchecker.correction(lowered)
        if candidate and candidate != lowered and fuzz.ratio(lowered, candidate) >= 80:
            return _match_case(token, candidate)
        return token


def snapshot_vocabulary(snapshot: ContextSnapshot) -> frozenset[str]:
    """Words from the student's course titles and codes, note titles, tags and courses, and event titles."""
    blobs: list[str] = []
    for course in snapshot.courses:
        blobs.extend([course.title, course.code])
    for note in snapshot.notes:
        blobs.extend([note.title, note.tags, note.course])
    for event in snapshot.events:
        blobs.append(event.title)

    words: set[str] = set()
    for blob in blobs:
        words.update(_VOCAB_RE.findall(blob.lower()))
    return frozenset(words)


def _match_case(source: str, replacement: str) -> str:
    if source.isupper() and len(source) > 1:
        return replacement.upper()
    if source.istitle():
        return replacement.title()
    return replacement
