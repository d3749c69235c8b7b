from __future__ import annotations

import statistics
import time
from pathlib import Path
from typing import Any

from portal_assistant.assistant.engine import ResponseEngine
from portal_assistant.data_models import ContextSnapshot
from portal_assistant.evaluation.metrics import classification_metrics, confusion_pairs, sub_intent_accuracy
from portal_assistant.utils.io import read_json, read_jsonl, write_json


class IntentBenchmark:
    """Replays labelled utterances through the engine and scores the routing."""

    def __init__(self, engine: ResponseEngine | None = None, snapshot: ContextSnapshot | None = None) -> None:
        self.engine = engine or ResponseEngine()
        self.snapshot = snapshot or ContextSnapshot()

    def run(self, gold_path: Path, output_path: Path | None = None) -> dict[str, Any]:
        rows = load_gold(gold_path)

        intent_true: list[str] = []
        intent_pred: list[str] = []
        sub_true: list[str | None] = []
        sub_pred: list[str | None] = []
        latencies: list[float] = []
        samples: list[dict[str, Any]] = []

        for row in rows:
            start = time.perf_counter()
            reply = self.engine.reply(row["utterance"], self.snapshot)
            latency_ms = (time.perf_counter() - start) * 1000

            intent_true.append(row["intent"])
            intent_pred.append(reply.intent)
            sub_true.append(row.get("sub_intent"))
            sub_pred.append(reply.sub_intent)
            latencies.append(latency_ms)
            samples.append(
                {
                    "utterance": row["utterance"],
                    "expected_intent": row["intent"],
                    "predicted_intent": reply.intent,
                    "predicted_sub_intent": reply.sub_intent,
                    "latency_ms": round(latency_ms, 3),
                }
            )

        report = {
            "count": len(rows),
            "intent": classification_metrics(intent_true, intent_pred) if rows else {},
            "sub_intent_accuracy": sub_intent_accuracy(sub_true, sub_pred),
            "confusions": confusion_pairs(intent_true, intent_pred),
            "avg_latency_ms": statistics.mean(latencies) if latencies else 0.0,
            "samples": samples,
        }
        if output_path is not None:
            write_json(output_path, report)
        return report


def load_gold(path: Path) -> list[dict[str, Any]]:
    if path.suffix == ".jsonl":
        rows = read_jsonl(path)
    else:
        rows = read_json(path)
    if not isinstance(rows, list):
        raise ValueError(f"Gold file must hold a list of rows: {path}")
    for idx, row in enumerate(rows):
        if "utterance" not in row or "intent" not in row:
            raise ValueError(f"Gold row {idx} needs 'utterance' and 'intent'")
    return rows
