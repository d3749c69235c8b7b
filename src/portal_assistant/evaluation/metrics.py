from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from sklearn.metrics import accuracy_score, f1_score, precision_score, recall_score


def classification_metrics(y_true: Sequence[str], y_pred: Sequence[str]) -> dict[str, float]:
    return {
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "precision_macro": float(precision_score(y_true, y_pred, average="macro", zero_division=0)),
        "recall_macro": float(recall_score(y_true, y_pred, average="macro", zero_division=0)),
        "f1_macro": float(f1_score(y_true, y_pred, average="macro", zero_division=0)),
    }


def confusion_pairs(y_true: Sequence[str], y_pred: Sequence[str]) -> list[dict[str, str | int]]:
    """Most frequent (expected, predicted) mistakes, largest first."""
    counts = Counter((t, p) for t, p in zip(y_true, y_pred) if t != p)
    return [
        {"expected": expected, "predicted": predicted, "count": count}
        for (expected, predicted), count in counts.most_common()
    ]


def sub_intent_accuracy(expected: Sequence[str | None], predicted: Sequence[str | None]) -> float:
    pairs = [(e, p) for e, p in zip(expected, predicted) if e is not None]
    if not pairs:
        return 0.0
    return sum(1 for e, p in pairs if e == p) / len(pairs)
