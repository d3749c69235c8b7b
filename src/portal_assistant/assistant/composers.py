from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from portal_assistant.assistant import templates
from portal_assistant.config import SETTINGS, Settings
from portal_assistant.data_models import Course, ContextSnapshot, Event, Note
from portal_assistant.nlp import intent as intents

EXCELLENT_GRADES = {"A", "A+", "A-"}
GOOD_GRADES = {"B+", "B", "B-"}
EVENT_ICONS = {
    "exam": "📝",
    "assignment": "📋",
    "deadline": "⏳",
    "holiday": "🎉",
}
DEFAULT_EVENT_ICON = "📅"

NOTE_STOPWORDS = {
    "note", "notes", "search", "find", "in", "my", "for", "about", "me", "on", "the", "a", "an",
    "any", "all", "show", "please", "can", "you", "i", "do", "have", "what", "whats", "what's",
    "are", "is", "of", "to", "some", "with", "related", "look", "looking", "up", "get",
}
_NOTE_WORD_RE = re.compile(r"[a-z0-9+#']+")


@dataclass(frozen=True)
class TurnContext:
    """Everything a composer may read while answering one utterance."""

    text: str
    snapshot: ContextSnapshot
    display_name: str
    today: date
    sub_intent: str | None = None
    course: Course | None = None
    choose: Callable[[Sequence[str]], str] = field(default=lambda options: options[0])
    settings: Settings = SETTINGS


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _more(total: int, limit: int, noun: str = "more") -> str:
    if total <= limit:
        return ""
    return f"...and {total - limit} {noun}."


def _numbered(lines: Sequence[str]) -> str:
    return "\n".join(f"{idx}. {line}" for idx, line in enumerate(lines, start=1))


def _listing(header: str, lines: Sequence[str], limit: int, footer: str, noun: str = "more") -> str:
    parts = [header, "", _numbered(lines[:limit])]
    overflow = _more(len(lines), limit, noun)
    if overflow:
        parts.append(overflow)
    parts.extend(["", footer])
    return "\n".join(parts)


def _score(value: float) -> str:
    return f"{value:g}"


def event_icon(event_type: str) -> str:
    return EVENT_ICONS.get(event_type, DEFAULT_EVENT_ICON)


def compose_greeting(turn: TurnContext) -> str:
    template = turn.choose(templates.GREETINGS)
    return template.format(name=turn.display_name, university=turn.settings.university_name)


def compose_help(turn: TurnContext) -> str:
    return templates.HELP.format(university=turn.settings.university_name)


def compose_personal_info(turn: TurnContext) -> str:
    profile = turn.snapshot.profile
    return "\n".join(
        [
            "**YOUR PROFILE:**",
            "",
            f"👤 **Name:** {profile.name or turn.display_name}",
            f"🆔 **Student ID:** {profile.student_id or 'N/A'}",
            f"🎓 **Course:** {profile.course or 'N/A'}",
            f"📧 **Email:** {profile.email or 'Not set'}",
            f"📱 **Phone:** {profile.phone or 'Not set'}",
            f"📚 **Current Semester:** {profile.semester or 'N/A'}",
            "",
            "Need to update any of this information? You can edit your profile anytime!",
        ]
    )


def compose_courses(turn: TurnContext) -> str:
    courses = turn.snapshot.courses
    if not courses:
        return (
            "You don't have any courses on record yet. 📚\n\n"
            "Once you're enrolled, I can show your progress, grades, and upcoming subjects here."
        )

    limit = turn.settings.course_list_limit
    by_status = {status: [c for c in courses if c.status == status] for status in ("ongoing", "completed", "upcoming")}

    if turn.sub_intent == "ongoing":
        ongoing = by_status["ongoing"]
        if not ongoing:
            return "Hmm, looks like you don't have any ongoing courses right now. 🤔\n\nWant me to check your upcoming courses instead?"
        average = round(sum(c.progress for c in ongoing) / len(ongoing))
        return _listing(
            f"You're currently taking {_plural(len(ongoing), 'course')} with an average progress of {average}%.",
            [f"{c.title} ({c.progress}%)" for c in ongoing],
            limit,
            "Want details about any specific course?",
        )

    if turn.sub_intent == "completed":
        completed = by_status["completed"]
        if not completed:
            return "You haven't completed any courses yet. But you're making great progress on your current ones! 💪"
        lines = [
            f"{c.title} - Grade {c.grades.final_grade}" if c.grades.has_final_grade else c.title
            for c in completed
        ]
        return _listing(
            f"You've completed {_plural(len(completed), 'course')}! 🎉",
            lines,
            limit,
            "Would you like to see your grades or details about a specific course?",
        )

    if turn.sub_intent == "upcoming":
        upcoming = sorted(by_status["upcoming"], key=lambda c: c.semester)
        if not upcoming:
            return "No upcoming courses scheduled yet. You're focusing on your current semester - that's smart! 📚"
        return _listing(
            f"You have {_plural(len(upcoming), 'course')} planned for future semesters.",
            [f"{c.title} (Semester {c.semester})" if c.semester else c.title for c in upcoming],
            limit,
            "Excited about any particular course?",
        )

    if turn.course is not None:
        return _course_details(turn.course)

    ongoing, completed, upcoming = (len(by_status[s]) for s in ("ongoing", "completed", "upcoming"))
    return f"""I can help you with your courses! Here's your overview:

📚 Currently studying: {_plural(ongoing, 'course')}
✅ Completed: {_plural(completed, 'course')}
⏳ Upcoming: {_plural(upcoming, 'course')}

What would you like to know more about?

🔹 **Current courses** progress
🔹 **Completed courses** and grades
🔹 **Upcoming courses** for next semester

Just ask!"""


def _course_details(course: Course) -> str:
    lines = [f"**{course.title}**" + (f" ({course.code})" if course.code else "")]
    lines.append(f"Status: {course.status.capitalize()}")
    if course.semester:
        lines.append(f"Semester: {course.semester}")
    if course.status == "ongoing":
        lines.append(f"Progress: {course.progress}%")
    if course.status == "completed" and course.grades.has_final_grade:
        grade_line = f"Final grade: {course.grades.final_grade}"
        if course.grades.total is not None:
            grade_line += f" ({_score(course.grades.total)}/100)"
        lines.append(grade_line)
    return "\n".join(lines)


def compose_grades(turn: TurnContext) -> str:
    if turn.course is not None:
        return _course_grade(turn.course)

    courses = turn.snapshot.courses
    graded = [c for c in courses if c.status == "completed" and c.grades.has_final_grade]
    if not graded:
        return (
            "You don't have any final grades yet - you're still working on your current courses! 💪\n\n"
            "Once you complete your ongoing courses, I'll be able to show you your results. Keep up the great work!"
        )

    excellent = sum(1 for c in graded if c.grades.final_grade in EXCELLENT_GRADES)
    good = sum(1 for c in graded if c.grades.final_grade in GOOD_GRADES)

    if excellent:
        parts = [f"Excellent work! 🌟 You've earned {excellent} A-grade{'' if excellent == 1 else 's'} so far."]
    elif good:
        parts = [f"Great progress! 👍 You're doing well with {good} B-grade{'' if good == 1 else 's'}."]
    else:
        parts = [f"You've completed {_plural(len(graded), 'course')}! 📚"]

    totals = [c.grades.total for c in graded if c.grades.total is not None]
    if totals:
        average = round(sum(totals) / len(totals), 1)
        parts.append(f"Your overall average is {average:.1f}% - {_performance_tier(average)}")

    parts.append(f"You've completed {len(graded)} out of {_plural(len(courses), 'total course')}.")
    parts.append("Would you like to see grades for a specific course or need study tips for your current ones?")
    return "\n\n".join(parts)


def _performance_tier(average: float) -> str:
    if average >= 80:
        return "Outstanding performance! 🎉"
    if average >= 70:
        return "Great work! 👏"
    if average >= 60:
        return "Good progress! Keep it up! 💫"
    return "You're building your foundation. Keep learning! 📚"


def _course_grade(course: Course) -> str:
    if course.status == "completed":
        if not course.grades.has_final_grade:
            return f"{course.title} is completed, but its final grade hasn't been published yet."
        line = f"{course.title}: Grade {course.grades.final_grade}"
        if course.grades.total is not None:
            line += f" ({_score(course.grades.total)}/100)"
        return line
    if course.status == "ongoing":
        return f"{course.title} is ongoing. Progress: {course.progress}%"
    if course.semester:
        return f"{course.title} starts in Semester {course.semester}."
    return f"{course.title} hasn't started yet."


def compose_events(turn: TurnContext) -> str:
    events = turn.snapshot.events
    today = turn.today
    limit = turn.settings.event_list_limit
    sub = turn.sub_intent or "general"
    upcoming = sorted((e for e in events if e.date is not None and e.date >= today), key=lambda e: (e.date, e.time))

    if sub == "today":
        todays = [e for e in events if e.date == today]
        if not todays:
            return (
                "You have a free day today! 🎉 No scheduled events. Perfect time to catch up on studies or work on assignments.\n\n"
                "Would you like me to show you what's coming up this week instead?"
            )
        return _event_listing(f"You have {_plural(len(todays), 'event')} today:", todays, limit, with_date=False)

    if sub == "tomorrow":
        tomorrow = today + timedelta(days=1)
        selected = [e for e in events if e.date == tomorrow]
        if not selected:
            return "Nothing scheduled for tomorrow! 🎉 Want to see the rest of the week?"
        return _event_listing(f"You have {_plural(len(selected), 'event')} tomorrow:", selected, limit, with_date=False)

    if sub == "week":
        week_end = today + timedelta(days=6)
        selected = [e for e in upcoming if e.date <= week_end]
        if not selected:
            return "Your week looks clear! 🎉 No events in the next 7 days."
        return _event_listing(f"You have {_plural(len(selected), 'event')} this week:", selected, limit)

    if sub == "exams":
        selected = [e for e in upcoming if e.event_type == "exam"]
        if not selected:
            return "No upcoming exams on your calendar. 📝 Great time to get ahead on revision!"
        return _event_listing(f"You have {_plural(len(selected), 'upcoming exam')}:", selected, limit)

    if sub == "assignments":
        selected = [e for e in upcoming if e.event_type in {"assignment", "deadline"}]
        if not selected:
            return "No assignments or deadlines coming up. 📋 You're all caught up!"
        return _event_listing(f"You have {_plural(len(selected), 'upcoming deadline')}:", selected, limit)

    if not upcoming:
        return (
            "You don't have any upcoming events! 🎉\n\n"
            "Pretty quiet schedule ahead. Want me to help you plan some study sessions?"
        )
    return f"""I can help you with your schedule! You have {_plural(len(upcoming), 'upcoming event')}.

What specifically would you like to know about?

🗓️ **Today's events**
📅 **This week's schedule**
📝 **Upcoming exams**
📋 **Assignment deadlines**

Just ask me about any of these!"""


def _event_line(event: Event, with_date: bool) -> str:
    line = f"{event_icon(event.event_type)} {event.title}"
    if event.time:
        line += f" at {event.time}"
    if with_date and event.date is not None:
        line += f" on {event.date:%b %d}"
    if event.location:
        line += f" ({event.location})"
    return line


def _event_listing(header: str, events: Sequence[Event], limit: int, with_date: bool = True) -> str:
    return _listing(
        header,
        [_event_line(e, with_date) for e in events],
        limit,
        "Would you like details about any specific event?",
    )


def compose_announcements(turn: TurnContext) -> str:
    announcements = turn.snapshot.announcements
    if not announcements:
        return (
            "All quiet on the announcements front! 📢\n\n"
            "No new announcements right now. I'll let you know as soon as something important comes up!"
        )

    unread = [a for a in announcements if not a.read]

    if turn.sub_intent == "unread":
        if not unread:
            return "You're all caught up! ✅ No unread announcements."
        return _listing(
            f"You have {_plural(len(unread), 'unread announcement')}:",
            [("🔴 " if a.priority == "high" else "") + a.title for a in unread],
            turn.settings.unread_list_limit,
            "Would you like me to read any of them?",
        )

    # Upstream delivers announcements newest first.
    latest = announcements[0]
    parts = []
    if unread:
        parts.append(f"You have {_plural(len(unread), 'unread announcement')}!")
    parts.append(f"**Latest update:** {latest.title}" + (f"\n📅 {latest.time}" if latest.time else ""))
    if latest.priority == "high":
        parts.append("🔴 This is marked as important!")
    parts.append("Would you like me to read the full announcement or show you all unread ones?")
    return "\n\n".join(parts)


def extract_search_term(text: str) -> str:
    words = [w for w in _NOTE_WORD_RE.findall(text.lower()) if w not in NOTE_STOPWORDS]
    return " ".join(words)


def _note_line(note: Note, with_course: bool = True) -> str:
    line = ("⭐ " if note.favorite else "") + note.title
    if with_course and note.course:
        line += f"\n   📚 {note.course}"
    return line


def compose_notes(turn: TurnContext) -> str:
    notes = turn.snapshot.notes
    if not notes:
        return """You haven't created any notes yet, but I can help you get started! 📝

You can create notes for:
• Lecture summaries
• Assignment details
• Study materials
• Important reminders"""

    limit = turn.settings.note_search_limit

    if turn.sub_intent == "favorites":
        favorites = [n for n in notes if n.favorite]
        if not favorites:
            return "You haven't marked any notes as favorite yet. ⭐ Star a note to find it quickly here."
        return _listing(
            f"You have {_plural(len(favorites), 'favorite note')}:",
            [_note_line(n) for n in favorites],
            limit,
            "Which note would you like to open?",
            noun="more notes",
        )

    term = extract_search_term(turn.text)

    if turn.course is not None:
        course_title = turn.course.title.lower()
        matching = [n for n in notes if n.course and (course_title in n.course.lower() or n.course.lower() in course_title)]
        if not matching:
            # The resolving word may still name a topic inside other notes.
            if term and _notes_matching(notes, term):
                return _search_notes(notes, term, limit)
            return f"You don't have any notes for {turn.course.title} yet. 📝"
        return _listing(
            f"You have {_plural(len(matching), 'note')} for {turn.course.title}:",
            [_note_line(n, with_course=False) for n in matching],
            limit,
            "Which note would you like to open?",
            noun="more notes",
        )

    if term:
        return _search_notes(notes, term, limit)

    favorite_count = sum(1 for n in notes if n.favorite)
    header = f"You have {_plural(len(notes), 'note')} in your collection! 📚"
    if favorite_count:
        header += f"\n⭐ {_plural(favorite_count, 'favorite')}"
    recent_limit = turn.settings.recent_note_limit
    parts = [header, "", "**Your recent notes:**", _numbered([_note_line(n, with_course=False) for n in notes[:recent_limit]])]
    overflow = _more(len(notes), recent_limit)
    if overflow:
        parts.append(overflow)
    parts.extend(["", "Want me to help you find something specific? Just tell me what you're looking for!"])
    return "\n".join(parts)


def _notes_matching(notes: Sequence[Note], term: str) -> list[Note]:
    return [
        n
        for n in notes
        if term in n.title.lower() or term in n.content.lower() or term in n.tags.lower() or term in n.course.lower()
    ]


def _search_notes(notes: Sequence[Note], term: str, limit: int) -> str:
    matching = _notes_matching(notes, term)
    if not matching:
        return f"""I couldn't find any notes about "{term}". 🔍

Try searching for:
• Course names (like "Database" or "Programming")
• Topics (like "algorithms" or "testing")
• Tags (like "lecture" or "assignment")"""

    if len(matching) == 1:
        note = matching[0]
        lines = [f'Found your note about "{term}"! 📝', "", ("⭐ " if note.favorite else "") + f"**{note.title}**"]
        if note.course:
            lines.append(f"📚 From: {note.course}")
        if note.tags:
            lines.append(f"🏷️ Tagged as: {note.tags}")
        if note.files:
            lines.append(f"📎 {_plural(len(note.files), 'attachment')}")
        lines.extend(["", "Would you like me to open this note for you?"])
        return "\n".join(lines)

    return _listing(
        f'Great! I found {_plural(len(matching), "note")} about "{term}":',
        [_note_line(n) for n in matching],
        limit,
        "Which note would you like to open?",
        noun="more notes",
    )


def compose_thanks(turn: TurnContext) -> str:
    return templates.THANKS.format(name=turn.display_name)


def compose_generic_question(turn: TurnContext) -> str:
    return templates.GENERIC_QUESTION


def compose_fallback(turn: TurnContext) -> str:
    return turn.choose(templates.FALLBACKS).format(name=turn.display_name)


def compose_escalation(turn: TurnContext) -> str:
    return templates.ESCALATION


COMPOSERS: dict[str, Callable[[TurnContext], str]] = {
    intents.GREETING: compose_greeting,
    intents.HELP: compose_help,
    intents.PERSONAL_INFO: compose_personal_info,
    intents.COURSES: compose_courses,
    intents.GRADES: compose_grades,
    intents.EVENTS: compose_events,
    intents.ANNOUNCEMENTS: compose_announcements,
    intents.NOTES: compose_notes,
    intents.THANKS: compose_thanks,
    intents.GENERIC_QUESTION: compose_generic_question,
    intents.FALLBACK: compose_fallback,
    intents.ESCALATION: compose_escalation,
}
