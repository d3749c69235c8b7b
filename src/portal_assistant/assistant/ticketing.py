from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping
from typing import Any

import requests

from portal_assistant.assistant import templates
from portal_assistant.assistant.engine import ResponseEngine, TurnAnalysis, coerce_snapshot
from portal_assistant.data_models import ContextSnapshot
from portal_assistant.support.tickets import TicketClient, TicketError, build_ticket_request

logger = logging.getLogger(__name__)

SUPPORT_ISSUE_PATTERN = re.compile(
    r"not updated|not showing|wrong|incorrect|missing|validate|check with staff|\bissue|\bproblem|\berror"
)


def is_support_issue(text: str) -> bool:
    return SUPPORT_ISSUE_PATTERN.search(text.lower()) is not None


class TicketingAssistant:
    """
    Asynchronous variant of the assistant that files a support ticket when an
    utterance escalates or reports a problem with portal data.

    Ticket creation runs in a worker thread under ``timeout_seconds``. Any
    transport failure, timeout included, becomes the fixed apology reply.
    """

    def __init__(
        self,
        client: TicketClient,
        engine: ResponseEngine | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.client = client
        self.engine = engine or ResponseEngine()
        self.timeout_seconds = timeout_seconds or self.engine.settings.ticket_timeout_seconds

    async def respond_async(self, utterance: str, context: ContextSnapshot | Mapping[str, Any] | None = None) -> str:
        snapshot = coerce_snapshot(context)
        analysis = self.engine.analyze(utterance, snapshot)

        if analysis.scope.out_of_scope or is_support_issue(analysis.normalized):
            return await self._forward(analysis, snapshot)
        return self.engine.compose(analysis, snapshot)

    async def _forward(self, analysis: TurnAnalysis, snapshot: ContextSnapshot) -> str:
        course = analysis.course_match.course if analysis.course_match else None
        if course is None:
            course = self.engine.course_resolver.resolve_course(analysis.normalized, snapshot.courses)

        request = build_ticket_request(
            issue=analysis.utterance,
            profile=snapshot.profile,
            display_name=self.engine.display_name(snapshot),
            course=course,
        )

        try:
            ticket = await asyncio.wait_for(
                asyncio.to_thread(self.client.create_ticket, request),
                timeout=self.timeout_seconds,
            )
        except (requests.RequestException, TicketError, asyncio.TimeoutError) as exc:
            logger.warning("Support ticket creation failed: %s", exc)
            return templates.TICKET_FAILED

        if analysis.scope.out_of_scope:
            return templates.TICKET_ESCALATED.format(ticket_id=ticket.ticket_id)
        course_suffix = f" for {course.title}" if course else ""
        return templates.TICKET_CREATED.format(ticket_id=ticket.ticket_id, course_suffix=course_suffix)
