from __future__ import annotations

from portal_assistant.app.cli import load_snapshot
from portal_assistant.assistant.engine import ResponseEngine
from portal_assistant.config import SAMPLES_DIR, SETTINGS
from portal_assistant.utils.logging import configure_logging


if __name__ == "__main__":
    configure_logging()
    snapshot = load_snapshot(SAMPLES_DIR / "context_snapshot.json")
    engine = ResponseEngine()
    print(f"{SETTINGS.assistant_name} on the sample portal context (type 'exit' to quit)")
    print(f"\nAssistant: {engine.welcome(snapshot)}")
    while True:
        query = input("\nYou: ").strip()
        if query.lower() in {"exit", "quit"}:
            break
        if not query:
            continue
        reply = engine.reply(query, snapshot)
        print(f"\nAssistant: {reply.text}")
        detail = f"Intent: {reply.intent}"
        if reply.sub_intent:
            detail += f" ({reply.sub_intent})"
        if reply.course_code:
            detail += f" | Course: {reply.course_code}"
        print(detail)
