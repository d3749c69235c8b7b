from __future__ import annotations

from portal_assistant.data_models import ContextSnapshot
from portal_assistant.nlp.query_normalizer import QueryNormalizer, snapshot_vocabulary


def test_query_normalizer_expands_shortcuts() -> None:
    normalizer = QueryNormalizer()
    normalized = normalizer.normalize("wen is my assgn dline tmrw")

    assert normalized.applied is True
    assert normalized.corrected == "when is my assignment deadline tomorrow"
    assert {"from": "dline", "to": "deadline"} in normalized.changes


def test_query_normalizer_leaves_plain_text_alone() -> None:
    normalizer = QueryNormalizer()
    normalized = normalizer.normalize("  show my   schedule  ")

    assert normalized.applied is False
    assert normalized.corrected == "show my schedule"


def test_shortcuts_only_match_whole_words() -> None:
    normalized = QueryNormalizer().normalize("semester schedule")

    assert normalized.corrected == "semester schedule"


def test_empty_query() -> None:
    normalized = QueryNormalizer().normalize("   ")

    assert normalized.applied is False
    assert normalized.changes == []


def test_snapshot_vocabulary_collects_portal_words() -> None:
    snapshot = ContextSnapshot.from_dict(
        {
            "courses": [{"id": "c1", "title": "Compiler Construction", "code": "CS ZG612"}],
            "notes": [{"id": "n1", "title": "Lexer notes", "tags": "Lecture Notes", "course": "Compiler Construction"}],
        }
    )

    assert {"compiler", "construction", "lexer", "lecture", "notes"} <= snapshot_vocabulary(snapshot)


def test_spell_correction_keeps_domain_terms() -> None:
    normalizer = QueryNormalizer(spell_correction=True)
    normalized = normalizer.normalize("show my tmrw deadlines")

    assert normalized.corrected == "show my tomorrow deadlines"


def test_spell_correction_keeps_dates_and_codes_intact() -> None:
    normalizer = QueryNormalizer(spell_correction=True)

    assert normalizer.normalize("any exams on 2026-10-24?").corrected == "any exams on 2026-10-24?"
    assert normalizer.normalize("what grade did I get in CS301").corrected == "what grade did I get in CS301"
    assert normalizer.normalize("notes for SE ZG514, please").corrected == "notes for SE ZG514, please"


def test_spell_correction_uses_per_call_vocabulary() -> None:
    normalizer = QueryNormalizer(spell_correction=True)
    vocabulary = frozenset({"database", "systems"})

    normalized = normalizer.normalize("grades for databse systems", vocabulary=vocabulary)

    assert normalized.corrected == "grades for database systems"
    assert normalized.changes == [{"from": "databse", "to": "database"}]
    assert normalizer.known_terms == frozenset(QueryNormalizer.DOMAIN_TERMS)
