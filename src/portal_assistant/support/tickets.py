from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any

import requests

from portal_assistant.config import SETTINGS
from portal_assistant.data_models import Course, Profile

logger = logging.getLogger(__name__)

_CATEGORY_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("grades", re.compile(r"grade|mark")),
    ("content", re.compile(r"content|material|slide")),
    ("technical", re.compile(r"technical|not working|error")),
]


class TicketError(RuntimeError):
    """Raised when the ticket service answers with something we cannot use."""


@dataclass
class TicketRequest:
    student_id: str
    student_name: str
    student_email: str
    subject: str
    description: str
    category: str = "general"
    priority: str = "medium"
    course_id: str | None = None
    course_name: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "studentEmail": self.student_email,
            "subject": self.subject,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
        }
        if self.course_id:
            payload["courseId"] = self.course_id
            payload["courseName"] = self.course_name
        return payload


@dataclass
class Ticket:
    ticket_id: str
    subject: str
    status: str = "open"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def infer_category(text: str) -> str:
    lowered = text.lower()
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(lowered):
            return category
    return "general"


def build_ticket_request(
    issue: str,
    profile: Profile,
    display_name: str,
    course: Course | None = None,
) -> TicketRequest:
    return TicketRequest(
        student_id=profile.student_id or "unknown",
        student_name=profile.name or display_name,
        student_email=profile.email or "unknown@email.com",
        subject=f"Issue with {course.title}" if course else "General Support Request",
        description=issue,
        category=infer_category(issue),
        course_id=course.course_id if course else None,
        course_name=course.title if course else None,
    )


class TicketClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.base_url = (base_url or SETTINGS.ticket_api_url or "").rstrip("/")
        self.token = token if token is not None else SETTINGS.ticket_api_token
        self.timeout_seconds = timeout_seconds or SETTINGS.ticket_timeout_seconds
        if not self.base_url:
            raise ValueError("Ticket API URL is not configured (PORTAL_TICKET_API_URL)")

    def create_ticket(self, request: TicketRequest) -> Ticket:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = requests.post(
            f"{self.base_url}/tickets",
            json=request.to_payload(),
            headers=headers,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()

        try:
            body = response.json()
        except ValueError as exc:
            raise TicketError("Ticket service returned a non-JSON body") from exc

        raw = body.get("ticket") if isinstance(body, dict) else None
        if not isinstance(raw, dict) or raw.get("id") in (None, ""):
            raise TicketError("Ticket service reply has no ticket id")

        ticket = Ticket(
            ticket_id=str(raw["id"]),
            subject=str(raw.get("subject") or request.subject),
            status=str(raw.get("status") or "open"),
        )
        logger.info("Created support ticket #%s (%s)", ticket.ticket_id, request.category)
        return ticket
