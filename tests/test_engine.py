from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from portal_assistant.assistant import templates
from portal_assistant.assistant.engine import ResponseEngine, resolve_display_name, respond
from portal_assistant.config import Settings
from portal_assistant.data_models import ContextSnapshot

SAMPLE_CONTEXT = Path(__file__).resolve().parents[1] / "data" / "samples" / "context_snapshot.json"
TODAY = date(2026, 10, 19)


def _engine(**settings: object) -> ResponseEngine:
    return ResponseEngine(
        settings=Settings(**settings),
        choose=lambda options: options[0],
        today=lambda: TODAY,
    )


def _sample() -> ContextSnapshot:
    return ContextSnapshot.from_dict(json.loads(SAMPLE_CONTEXT.read_text(encoding="utf-8")))


def test_courses_question_routes_to_course_summary() -> None:
    text = _engine().respond("What courses am I taking?", _sample())

    assert "📚 Currently studying: 2 courses" in text
    assert "✅ Completed: 2 courses" in text
    assert "⏳ Upcoming: 1 course" in text


def test_greeting_uses_display_name() -> None:
    text = _engine().respond("hello", _sample())

    assert text == "Hello Hari Hara Sudhan! Great to see you here. I'm ready to help with your academic needs!"


@pytest.mark.parametrize(
    ("utterance", "expected"),
    [
        ("What courses am I taking?", "You don't have any courses on record yet."),
        ("How are my grades?", "You don't have any final grades yet"),
        ("show my events", "You don't have any upcoming events!"),
        ("what's due today", "You have a free day today!"),
        ("Any new announcements?", "All quiet on the announcements front!"),
        ("show my notes", "You haven't created any notes yet"),
    ],
)
def test_empty_collections_get_specific_empty_state(utterance: str, expected: str) -> None:
    engine = _engine()
    text = engine.respond(utterance, {})

    assert expected in text
    assert text not in {option.format(name="Student") for option in templates.FALLBACKS}


@pytest.mark.parametrize(
    "utterance",
    ["what is 2+2", "what is 2+2 in my course", "should i skip my exam", "who is the president of my class"],
)
def test_out_of_scope_escalates_before_intents(utterance: str) -> None:
    reply = _engine().reply(utterance, _sample())

    assert reply.intent == "escalation"
    assert reply.text == templates.ESCALATION


def test_long_unmatched_escalation_is_configurable() -> None:
    text = "tell me something interesting about life"

    assert _engine().reply(text, {}).intent == "fallback"
    assert _engine(escalate_unmatched_min_length=20).reply(text, {}).intent == "escalation"


def test_course_listing_truncates_at_four() -> None:
    courses = [{"id": f"c{i}", "title": f"Elective {i}", "status": "ongoing", "progress": 50} for i in range(1, 7)]
    text = _engine().respond("show my current courses", {"courses": courses})

    assert text.startswith("You're currently taking 6 courses with an average progress of 50%.")
    assert "4. Elective 4 (50%)" in text
    assert "5. " not in text
    assert "...and 2 more." in text


def test_event_listing_truncates_at_three() -> None:
    events = [
        {"id": f"e{i}", "title": f"Lab {i}", "date": TODAY.isoformat(), "time": f"1{i}:00", "type": "assignment"}
        for i in range(5)
    ]
    text = _engine().respond("what's due today", {"events": events})

    assert "You have 5 events today:" in text
    assert "3. 📋 Lab 2 at 12:00" in text
    assert "4. " not in text
    assert "...and 2 more." in text


def test_note_search_truncates_at_four() -> None:
    notes = [{"id": f"n{i}", "title": f"Recursion part {i}"} for i in range(1, 7)]
    text = _engine().respond("find notes on recursion", {"notes": notes})

    assert 'Great! I found 6 notes about "recursion":' in text
    assert "4. Recursion part 4" in text
    assert "5. " not in text
    assert "...and 2 more notes." in text


def test_display_name_resolution() -> None:
    assert resolve_display_name("Asha Rao", "Student") == "Asha Rao"
    assert resolve_display_name("", "Ravi") == "Ravi"
    assert resolve_display_name("Student", "Ravi") == "Ravi"
    assert resolve_display_name(None, None) == "Student"
    assert resolve_display_name("  Asha  ", "Ravi") == resolve_display_name("  Asha  ", "Ravi") == "Asha"


def test_grades_summary_scenario() -> None:
    context = {
        "courses": [
            {
                "id": "c1",
                "title": "Database Systems",
                "code": "CS301",
                "status": "completed",
                "grades": {"finalGrade": "A", "total": 92},
            }
        ]
    }
    text = _engine().respond("how are my grades", context)

    assert "You've earned 1 A-grade so far." in text
    assert "Your overall average is 92.0% - Outstanding performance! 🎉" in text
    assert "You've completed 1 out of 1 total course." in text


def test_todays_exam_scenario() -> None:
    context = {"events": [{"id": "e1", "title": "Quiz 1", "date": TODAY.isoformat(), "time": "10:00", "type": "exam"}]}
    text = _engine().respond("what's due today", context)

    assert "You have 1 event today:" in text
    assert "1. 📝 Quiz 1 at 10:00" in text
    assert "2. " not in text
    assert "free day" not in text


def test_course_specific_grade() -> None:
    engine = _engine()

    assert engine.respond("my marks in operating systems", _sample()) == "Operating Systems is ongoing. Progress: 65%"
    reply = engine.reply("what grade did I get in SE ZG514", _sample())
    assert reply.course_code == "SE ZG514"
    assert reply.text == "Object Oriented Programming in Design: Grade A (90/100)"


def test_course_details() -> None:
    text = _engine().respond("tell me about the cloud computing course", _sample())

    assert text == "**Cloud Computing** (CC ZG527)\nStatus: Upcoming\nSemester: 4"


def test_week_events_are_sorted_with_dates() -> None:
    text = _engine().respond("show this week's schedule", _sample())

    assert text.startswith("You have 2 events this week:")
    assert "1. 📋 Testing Assignment 2 at 23:59 on Oct 21" in text
    assert "2. 📝 OS Mid-Semester Exam at 10:00 on Oct 24 (Online)" in text


def test_latest_announcement() -> None:
    text = _engine().respond("any new announcements?", _sample())

    assert "You have 1 unread announcement!" in text
    assert "**Latest update:** Mid-semester exam hall tickets released" in text
    assert "🔴 This is marked as important!" in text


def test_single_note_search_result() -> None:
    text = _engine().respond("find notes on normalization", _sample())

    assert text.startswith('Found your note about "normalization"! 📝')
    assert "**Database Normalization Forms**" in text
    assert "🏷️ Tagged as: Lecture Notes" in text


def test_notes_scoped_to_resolved_course() -> None:
    text = _engine().respond("notes for operating systems", _sample())

    assert text.startswith("You have 1 note for Operating Systems:")
    assert "1. ⭐ Operating System Process Management" in text


def test_personal_info_defaults() -> None:
    text = _engine().respond("who am i", {"userName": "Meera", "profile": {"id": "2025HT9"}})

    assert "👤 **Name:** Meera" in text
    assert "🆔 **Student ID:** 2025HT9" in text
    assert "📧 **Email:** Not set" in text
    assert "🎓 **Course:** N/A" in text


def test_fallback_and_generic_question() -> None:
    engine = _engine()

    assert engine.respond("ok", {"userName": "Meera"}).startswith("I'd love to help you, Meera!")
    assert engine.respond("Where is the library?", {}) == templates.GENERIC_QUESTION


def test_shortcuts_are_expanded_before_routing() -> None:
    reply = _engine().reply("anything due tmrw", _sample())

    assert reply.intent == "events"
    assert reply.sub_intent == "tomorrow"


def test_welcome_message() -> None:
    assert _engine().welcome({}) == "Hello Student! I'm BITS-Bot, your intelligent academic assistant. How can I help you today?"


def test_module_level_respond_accepts_plain_dicts() -> None:
    assert "courses on record" in respond("What courses am I taking?", {"courses": []})


def test_course_word_without_course_notes_still_searches_notes() -> None:
    context = {
        "courses": [{"id": "c1", "title": "Design and Analysis of Algorithms", "status": "ongoing"}],
        "notes": [{"id": "n1", "title": "Algorithms cheat sheet", "tags": "algorithms"}],
    }
    text = _engine().respond("find notes on algorithms", context)

    assert text.startswith('Found your note about "algorithms"! 📝')
    assert "**Algorithms cheat sheet**" in text


def test_course_without_notes_and_no_topic_hits() -> None:
    context = {
        "courses": [{"id": "c1", "title": "Cloud Computing", "status": "upcoming"}],
        "notes": [{"id": "n1", "title": "Lexer notes"}],
    }

    assert _engine().respond("notes for cloud computing", context) == "You don't have any notes for Cloud Computing yet. 📝"


def test_spell_correction_keeps_dates_out_of_arithmetic_guard() -> None:
    plain = _engine().reply("any exams on 2026-10-24", _sample())
    corrected = _engine(spell_correction=True).reply("any exams on 2026-10-24", _sample())

    assert plain.intent == corrected.intent == "events"


def test_spell_correction_keeps_course_codes() -> None:
    context = {
        "courses": [
            {"id": "c1", "title": "Database Systems", "code": "CS301", "status": "completed", "grades": {"finalGrade": "A", "total": 92}}
        ]
    }
    reply = _engine(spell_correction=True).reply("what grade did I get in CS301", context)

    assert reply.course_code == "CS301"
    assert reply.text == "Database Systems: Grade A (92/100)"


def test_spell_correction_vocabulary_is_per_snapshot() -> None:
    engine = _engine(spell_correction=True)
    before = engine.normalizer.known_terms

    reply = engine.reply("grades for databse systems", {"courses": [{"id": "c1", "title": "Database Systems", "status": "ongoing", "progress": 40}]})
    engine.reply("show my notes", _sample())

    assert reply.text == "Database Systems is ongoing. Progress: 40%"
    assert engine.normalizer.known_terms == before
