from __future__ import annotations

from datetime import date

from portal_assistant.assistant.composers import (
    TurnContext,
    compose_announcements,
    compose_courses,
    compose_notes,
    event_icon,
    extract_search_term,
)
from portal_assistant.data_models import ContextSnapshot


def _turn(payload: dict, sub_intent: str | None = None, text: str = "") -> TurnContext:
    return TurnContext(
        text=text,
        snapshot=ContextSnapshot.from_dict(payload),
        display_name="Student",
        today=date(2026, 10, 19),
        sub_intent=sub_intent,
    )


def test_extract_search_term_drops_filler_words() -> None:
    assert extract_search_term("can you find my notes about machine learning") == "machine learning"
    assert extract_search_term("show all my notes") == ""
    assert extract_search_term("search c++ notes") == "c++"


def test_event_icons() -> None:
    assert event_icon("exam") == "📝"
    assert event_icon("assignment") == "📋"
    assert event_icon("holiday") == "🎉"
    assert event_icon("seminar") == "📅"


def test_unread_announcements_are_capped() -> None:
    announcements = [
        {"id": f"a{i}", "title": f"Notice {i}", "priority": "high" if i == 0 else "low", "read": False}
        for i in range(5)
    ]
    text = compose_announcements(_turn({"announcements": announcements}, sub_intent="unread"))

    assert text.startswith("You have 5 unread announcements:")
    assert "1. 🔴 Notice 0" in text
    assert "3. Notice 2" in text
    assert "...and 2 more." in text


def test_all_announcements_read() -> None:
    text = compose_announcements(_turn({"announcements": [{"id": "a1", "title": "Done", "read": True}]}, sub_intent="unread"))

    assert text == "You're all caught up! ✅ No unread announcements."


def test_completed_courses_list_grades() -> None:
    payload = {
        "courses": [
            {"id": "c1", "title": "Compilers", "status": "completed", "grades": {"finalGrade": "B+"}},
            {"id": "c2", "title": "Networks", "status": "completed", "grades": {"finalGrade": "N/A"}},
        ]
    }
    text = compose_courses(_turn(payload, sub_intent="completed"))

    assert "1. Compilers - Grade B+" in text
    assert "2. Networks\n" in text


def test_upcoming_courses_sorted_by_semester() -> None:
    payload = {
        "courses": [
            {"id": "c1", "title": "Later", "semester": 6, "status": "upcoming"},
            {"id": "c2", "title": "Sooner", "semester": 4, "status": "upcoming"},
        ]
    }
    text = compose_courses(_turn(payload, sub_intent="upcoming"))

    assert text.index("Sooner (Semester 4)") < text.index("Later (Semester 6)")


def test_recent_notes_with_favorites() -> None:
    notes = [{"id": f"n{i}", "title": f"Note {i}", "favorite": i == 0} for i in range(4)]
    text = compose_notes(_turn({"notes": notes}, sub_intent="browse", text="show my notes"))

    assert text.startswith("You have 4 notes in your collection! 📚\n⭐ 1 favorite")
    assert "3. Note 2" in text
    assert "...and 1 more." in text


def test_note_search_without_hits() -> None:
    text = compose_notes(_turn({"notes": [{"id": "n1", "title": "Graphs"}]}, sub_intent="browse", text="find notes on quantum"))

    assert text.startswith('I couldn\'t find any notes about "quantum". 🔍')
