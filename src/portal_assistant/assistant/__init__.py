from portal_assistant.assistant.engine import ResponseEngine, resolve_display_name, respond
from portal_assistant.assistant.session import ChatSession
from portal_assistant.assistant.ticketing import TicketingAssistant

__all__ = ["ChatSession", "ResponseEngine", "TicketingAssistant", "resolve_display_name", "respond"]
