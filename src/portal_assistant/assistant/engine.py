from __future__ import annotations

import logging
import random
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from portal_assistant.assistant import templates
from portal_assistant.assistant.composers import COMPOSERS, TurnContext
from portal_assistant.config import SETTINGS, Settings
from portal_assistant.data_models import DEFAULT_USER_NAME, ContextSnapshot
from portal_assistant.nlp import intent as intents
from portal_assistant.nlp.entity_extractor import CourseMatch, CourseResolver
from portal_assistant.nlp.intent import IntentClassifier, IntentPrediction
from portal_assistant.nlp.query_normalizer import QueryNormalizer, snapshot_vocabulary
from portal_assistant.nlp.scope_guard import ScopeDecision, ScopeGuard

logger = logging.getLogger(__name__)

COURSE_SCOPED_INTENTS = {intents.COURSES, intents.GRADES, intents.NOTES}


def resolve_display_name(profile_name: str | None, user_name: str | None) -> str:
    for candidate in (profile_name, user_name):
        name = (candidate or "").strip()
        if name and name != DEFAULT_USER_NAME:
            return name
    return DEFAULT_USER_NAME


def coerce_snapshot(context: ContextSnapshot | Mapping[str, Any] | None) -> ContextSnapshot:
    if isinstance(context, ContextSnapshot):
        return context
    return ContextSnapshot.from_dict(context)


@dataclass(frozen=True)
class TurnAnalysis:
    utterance: str
    normalized: str
    scope: ScopeDecision
    prediction: IntentPrediction
    course_match: CourseMatch | None = None

    @property
    def label(self) -> str:
        return intents.ESCALATION if self.scope.out_of_scope else self.prediction.label


@dataclass(frozen=True)
class AssistantReply:
    text: str
    intent: str
    sub_intent: str | None = None
    course_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "intent": self.intent,
            "sub_intent": self.sub_intent,
            "course_code": self.course_code,
        }


class ResponseEngine:
    """
    Maps one utterance plus a context snapshot to one response string.

    Order per turn: normalize, scope guard, intent rules, course resolution,
    composer. ``choose`` and ``today`` are injectable so tests can pin the
    randomly chosen template and the calendar date.
    """

    def __init__(
        self,
        settings: Settings = SETTINGS,
        classifier: IntentClassifier | None = None,
        scope_guard: ScopeGuard | None = None,
        course_resolver: CourseResolver | None = None,
        normalizer: QueryNormalizer | None = None,
        choose: Callable[[Sequence[str]], str] = random.choice,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings
        self.classifier = classifier or IntentClassifier()
        self.scope_guard = scope_guard or ScopeGuard(unmatched_min_length=settings.escalate_unmatched_min_length)
        self.course_resolver = course_resolver or CourseResolver(min_word_length=settings.course_word_min_length)
        self.normalizer = normalizer or QueryNormalizer(spell_correction=settings.spell_correction)
        self.choose = choose
        self.today = today

    def display_name(self, snapshot: ContextSnapshot) -> str:
        return resolve_display_name(snapshot.profile.name, snapshot.user_name)

    def welcome(self, context: ContextSnapshot | Mapping[str, Any] | None = None) -> str:
        snapshot = coerce_snapshot(context)
        return templates.WELCOME.format(name=self.display_name(snapshot), assistant=self.settings.assistant_name)

    def analyze(self, utterance: str, snapshot: ContextSnapshot) -> TurnAnalysis:
        vocabulary = snapshot_vocabulary(snapshot) if self.normalizer.spell_correction else frozenset()
        normalized = self.normalizer.normalize(utterance, vocabulary=vocabulary).corrected.lower().strip()

        scope = self.scope_guard.check(normalized, has_known_keyword=self.classifier.has_known_keyword(normalized))
        prediction = self.classifier.predict(normalized)

        course_match = None
        if not scope.out_of_scope and prediction.label in COURSE_SCOPED_INTENTS:
            course_match = self.course_resolver.resolve(normalized, snapshot.courses)

        return TurnAnalysis(
            utterance=utterance,
            normalized=normalized,
            scope=scope,
            prediction=prediction,
            course_match=course_match,
        )

    def compose(self, analysis: TurnAnalysis, snapshot: ContextSnapshot) -> str:
        turn = TurnContext(
            text=analysis.normalized,
            snapshot=snapshot,
            display_name=self.display_name(snapshot),
            today=self.today(),
            sub_intent=None if analysis.scope.out_of_scope else analysis.prediction.sub_intent,
            course=analysis.course_match.course if analysis.course_match else None,
            choose=self.choose,
            settings=self.settings,
        )
        return COMPOSERS[analysis.label](turn)

    def reply(self, utterance: str, context: ContextSnapshot | Mapping[str, Any] | None = None) -> AssistantReply:
        snapshot = coerce_snapshot(context)
        analysis = self.analyze(utterance, snapshot)
        logger.debug("Routing %r to %s", analysis.normalized, analysis.label)
        course = analysis.course_match.course if analysis.course_match else None
        return AssistantReply(
            text=self.compose(analysis, snapshot),
            intent=analysis.label,
            sub_intent=None if analysis.scope.out_of_scope else analysis.prediction.sub_intent,
            course_code=course.code if course else None,
        )

    def respond(self, utterance: str, context: ContextSnapshot | Mapping[str, Any] | None = None) -> str:
        return self.reply(utterance, context).text


def respond(utterance: str, context: ContextSnapshot | Mapping[str, Any] | None = None) -> str:
    return ResponseEngine().respond(utterance, context)
