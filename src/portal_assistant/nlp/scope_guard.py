from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeDecision:
    out_of_scope: bool
    reason: str | None = None


class ScopeGuard:
    """
    Detects utterances the portal assistant should hand off instead of answer.

    Checked before any intent rule, so "what is 2+2 in my course" still escalates.
    """

    OUT_OF_SCOPE_PATTERNS: dict[str, list[str]] = {
        # Digit-operator-digit, but not dates such as 2024-10-19.
        "arithmetic": [r"(?<![\d-])\d+\s*[+\-*/×÷]\s*\d+(?![\d-])"],
        "general_knowledge": [
            r"\bwho is (?:the |a )?(?:president|prime minister|ceo)\b",
            r"\bcapital of\b",
        ],
        "consumer_tech": [r"\b(?:windows|mac|macos|iphone|android)\b"],
        "entertainment": [r"\b(?:movies?|songs?|music|games?)\b"],
        "advice": [r"\bshould i\b", r"\bwhat should\b"],
    }

    def __init__(self, unmatched_min_length: int | None = None) -> None:
        self.unmatched_min_length = unmatched_min_length
        self._compiled = {
            reason: [re.compile(pattern) for pattern in patterns]
            for reason, patterns in self.OUT_OF_SCOPE_PATTERNS.items()
        }

    def check(self, text: str, has_known_keyword: bool = True) -> ScopeDecision:
        lowered = text.lower().strip()

        for reason, patterns in self._compiled.items():
            if any(pattern.search(lowered) for pattern in patterns):
                logger.debug("Escalating utterance (%s): %r", reason, lowered)
                return ScopeDecision(out_of_scope=True, reason=reason)

        if (
            self.unmatched_min_length is not None
            and not has_known_keyword
            and len(lowered) > self.unmatched_min_length
        ):
            logger.debug("Escalating long unmatched utterance (%s chars)", len(lowered))
            return ScopeDecision(out_of_scope=True, reason="unmatched_long")

        return ScopeDecision(out_of_scope=False)

    def is_out_of_scope(self, text: str, has_known_keyword: bool = True) -> bool:
        return self.check(text, has_known_keyword=has_known_keyword).out_of_scope
