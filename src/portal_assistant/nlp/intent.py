from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

GREETING = "greeting"
HELP = "help"
PERSONAL_INFO = "personal_info"
COURSES = "courses"
GRADES = "grades"
EVENTS = "events"
ANNOUNCEMENTS = "announcements"
NOTES = "notes"
THANKS = "thanks"
GENERIC_QUESTION = "generic_question"
FALLBACK = "fallback"
ESCALATION = "escalation"


def _keyword_pattern(keywords: tuple[str, ...], whole_words: bool) -> re.Pattern[str]:
    tail = r"\b" if whole_words else ""
    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(rf"\b(?:{alternatives}){tail}")


@dataclass(frozen=True)
class IntentRule:
    """One row of the ordered intent table: a label and the keywords that trigger it."""

    label: str
    keywords: tuple[str, ...]
    whole_words: bool = False
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", _keyword_pattern(self.keywords, self.whole_words))

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class IntentPrediction:
    label: str
    sub_intent: str | None = None
    matched_keyword: str | None = None


class IntentClassifier:
    """
    Ordered, first-match-wins keyword classifier for portal chat utterances.

    Keywords match at word starts ("grade" also catches "grades"); greeting
    keywords must be whole words so "this" or "history" never read as "hi".
    The rule order is the priority order.
    """

    RULES: tuple[IntentRule, ...] = (
        IntentRule(
            GREETING,
            ("hi", "hello", "hey", "greetings", "good morning", "good afternoon", "good evening"),
            whole_words=True,
        ),
        IntentRule(HELP, ("help", "what can you", "how can you", "assist")),
        IntentRule(PERSONAL_INFO, ("my name", "who am i", "profile", "about me", "my info", "my details")),
        IntentRule(COURSES, ("course", "subject", "class", "semester", "study", "enrolled")),
        IntentRule(GRADES, ("grade", "mark", "score", "result", "performance", "progress", "gpa")),
        IntentRule(
            EVENTS,
            ("event", "schedule", "deadline", "today", "tomorrow", "week", "due", "upcoming", "exam", "quiz", "assignment", "calendar"),
        ),
        IntentRule(ANNOUNCEMENTS, ("announcement", "news", "notification", "update", "notice")),
        IntentRule(NOTES, ("note", "search", "find")),
        IntentRule(THANKS, ("thank",)),
    )

    COURSE_SUB_INTENTS: tuple[tuple[str, tuple[str, ...]], ...] = (
        ("ongoing", ("current", "ongoing")),
        ("completed", ("completed", "finished")),
        ("upcoming", ("upcoming", "next")),
    )
    EVENT_SUB_INTENTS: tuple[tuple[str, tuple[str, ...]], ...] = (
        ("today", ("today",)),
        ("tomorrow", ("tomorrow",)),
        ("week", ("week",)),
        ("exams", ("exam", "test", "quiz")),
        ("assignments", ("assignment", "deadline", "due")),
    )
    ANNOUNCEMENT_SUB_INTENTS: tuple[tuple[str, tuple[str, ...]], ...] = (
        ("unread", ("unread", "all")),
    )
    NOTE_SUB_INTENTS: tuple[tuple[str, tuple[str, ...]], ...] = (
        ("favorites", ("favorite", "starred")),
    )

    def __init__(self, rules: tuple[IntentRule, ...] | None = None) -> None:
        self.rules = rules if rules is not None else self.RULES

    def predict(self, query: str) -> IntentPrediction:
        text = query.lower().strip()

        for rule in self.rules:
            match = rule.pattern.search(text)
            if match:
                sub_intent = self.sub_intent_for(rule.label, text)
                logger.debug("Intent %s (sub=%s) via %r", rule.label, sub_intent, match.group(0))
                return IntentPrediction(label=rule.label, sub_intent=sub_intent, matched_keyword=match.group(0))

        if "?" in text:
            return IntentPrediction(label=GENERIC_QUESTION)
        return IntentPrediction(label=FALLBACK)

    def has_known_keyword(self, query: str) -> bool:
        text = query.lower()
        return any(rule.matches(text) for rule in self.rules)

    def sub_intent_for(self, label: str, text: str) -> str | None:
        table = {
            COURSES: self.COURSE_SUB_INTENTS,
            EVENTS: self.EVENT_SUB_INTENTS,
            ANNOUNCEMENTS: self.ANNOUNCEMENT_SUB_INTENTS,
            NOTES: self.NOTE_SUB_INTENTS,
        }.get(label)
        if table is None:
            return None

        for sub_label, keywords in table:
            if any(re.search(rf"\b{re.escape(keyword)}", text) for keyword in keywords):
                return sub_label

        # Composers fill in the course-dependent "details" case themselves.
        return {COURSES: "summary", EVENTS: "general", ANNOUNCEMENTS: "latest", NOTES: "browse"}[label]
