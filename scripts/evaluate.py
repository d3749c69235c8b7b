from __future__ import annotations

import json

from portal_assistant.app.cli import load_snapshot
from portal_assistant.config import EVAL_DATA_DIR, REPORTS_DIR, SAMPLES_DIR
from portal_assistant.evaluation.benchmark import IntentBenchmark


if __name__ == "__main__":
    report = IntentBenchmark(snapshot=load_snapshot(SAMPLES_DIR / "context_snapshot.json")).run(
        gold_path=EVAL_DATA_DIR / "intent_gold.json",
        output_path=REPORTS_DIR / "intent_report.json",
    )
    print(json.dumps({key: report[key] for key in ("count", "intent", "sub_intent_accuracy", "confusions")}, indent=2))
