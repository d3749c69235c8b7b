from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from portal_assistant.config import EVAL_DATA_DIR, REPORTS_DIR, SAMPLES_DIR, SETTINGS, ensure_directories
from portal_assistant.data_models import ContextSnapshot
from portal_assistant.utils.logging import configure_logging


def load_snapshot(path: Path | None) -> ContextSnapshot:
    from portal_assistant.utils.io import read_json

    if path is None or not path.exists():
        return ContextSnapshot()
    return ContextSnapshot.from_dict(read_json(path))


def run_chat(context_path: Path | None) -> None:
    from portal_assistant.assistant.session import ChatSession
    from portal_assistant.assistant.ticketing import TicketingAssistant
    from portal_assistant.support.tickets import TicketClient

    ticketing = TicketingAssistant(client=TicketClient()) if SETTINGS.ticket_api_url else None
    session = ChatSession(context=load_snapshot(context_path), ticketing=ticketing)

    print(f"{SETTINGS.assistant_name} (type 'exit' to quit)")
    print(f"\nAssistant: {session.welcome()}")
    while True:
        query = input("\nYou: ").strip()
        if query.lower() in {"exit", "quit"}:
            break
        reply = asyncio.run(session.send_async(query)) if ticketing else session.send(query)
        if reply is None:
            continue
        print(f"\nAssistant: {reply.content}")


def run_eval(context_path: Path | None, gold_path: Path, out_path: Path) -> None:
    from portal_assistant.evaluation.benchmark import IntentBenchmark

    report = IntentBenchmark(snapshot=load_snapshot(context_path)).run(gold_path=gold_path, output_path=out_path)
    summary = {key: report[key] for key in ("count", "intent", "sub_intent_accuracy", "confusions")}
    print(json.dumps(summary, indent=2))


def run_server(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("portal_assistant.web.server:app", host=host, port=port)


def main() -> None:
    parser = argparse.ArgumentParser(description="Student Portal Assistant")
    parser.add_argument("command", choices=["chat", "evaluate", "serve"])
    parser.add_argument("--context", default=str(SAMPLES_DIR / "context_snapshot.json"))
    parser.add_argument("--gold", default=str(EVAL_DATA_DIR / "intent_gold.json"))
    parser.add_argument("--report", default=str(REPORTS_DIR / "intent_report.json"))
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    configure_logging()
    ensure_directories()

    context_path = Path(args.context) if args.context else None

    if args.command == "chat":
        run_chat(context_path=context_path)
    elif args.command == "evaluate":
        run_eval(context_path=context_path, gold_path=Path(args.gold), out_path=Path(args.report))
    elif args.command == "serve":
        run_server(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
