from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
SAMPLES_DIR = DATA_DIR / "samples"
EVAL_DATA_DIR = DATA_DIR / "eval"
REPORTS_DIR = DATA_DIR / "reports"


def _load_dotenv_file(path: Path) -> None:
    if not path.exists():
        return

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'\"")
        if key and key not in os.environ:
            os.environ[key] = value


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return int(raw)


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


_load_dotenv_file(PROJECT_ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    university_name: str = os.getenv("PORTAL_UNIVERSITY_NAME", "BITS Pilani")
    assistant_name: str = os.getenv("PORTAL_ASSISTANT_NAME", "BITS-Bot")

    ticket_api_url: str | None = os.getenv("PORTAL_TICKET_API_URL") or None
    ticket_api_token: str | None = os.getenv("PORTAL_TICKET_API_TOKEN") or None
    ticket_timeout_seconds: float = float(os.getenv("PORTAL_TICKET_TIMEOUT_SECONDS", "10"))

    # Unset disables the "long message with no known keyword" escalation.
    escalate_unmatched_min_length: int | None = _optional_int("PORTAL_ESCALATE_UNMATCHED_MIN_LENGTH")
    course_word_min_length: int = int(os.getenv("PORTAL_COURSE_WORD_MIN_LENGTH", "4"))
    spell_correction: bool = _flag("PORTAL_SPELL_CORRECTION")

    course_list_limit: int = 4
    event_list_limit: int = 3
    note_search_limit: int = 4
    recent_note_limit: int = 3
    unread_list_limit: int = 3


SETTINGS = Settings()


def ensure_directories() -> None:
    for path in [SAMPLES_DIR, EVAL_DATA_DIR, REPORTS_DIR]:
        path.mkdir(parents=True, exist_ok=True)
