from __future__ import annotations

import json
import logging
import math
import os
import re
import sys
from datetime import datetime, timezone
from typing import Any

_DAY_FIRST_DOTTED = {"he", "de", "ru", "pl", "tr", "uk", "fi", "cs"}


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    parts = [f"event={event}"]
    for key, value in fields.items():
        parts.append(f"{key}={value}")
    logger.log(level, " ".join(parts))


def configure_logging(logger_name: str, default_level: str = "INFO") -> logging.Logger:
    level_name = os.environ.get("AG_LOG_LEVEL", default_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        root.setLevel(getattr(logging, level_name, logging.INFO))
    _ensure_stdout_handler(level_name)
    _maybe_add_file_handler(level_name)
    _apply_log_overrides()
    return logging.getLogger(logger_name)


def _apply_log_overrides() -> None:
    overrides = os.environ.get("AG_LOG_LEVELS", "")
    if not overrides:
        return
    for item in overrides.split(","):
        if not item.strip() or "=" not in item:
            continue
        name, level = item.split("=", 1)
        logger = logging.getLogger(name.strip())
        logger.setLevel(getattr(logging, level.strip().upper(), logging.INFO))


def _maybe_add_file_handler(level_name: str) -> None:
    log_path = os.environ.get("AG_LOG_FILE")
    if not log_path:
        return
    root = logging.getLogger()
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_path):
            return
    os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
    handler = logging.FileHandler(log_path)
    handler.setLevel(getattr(logging, level_name, logging.INFO))
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    root.addHandler(handler)


def _ensure_stdout_handler(level_name: str) -> None:
    root = logging.getLogger()
    for handler in root.handlers:
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stdout:
            return
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level_name, logging.INFO))
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    root.addHandler(handler)


def json_dumps(value: Any, *, sort_keys: bool = True) -> str:
    return json.dumps(value, sort_keys=sort_keys, ensure_ascii=False)


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim separators.

    Letters outside ASCII (Hebrew titles, for instance) are kept.
    Returns an empty string when nothing alphanumeric remains.
    """
    if not text:
        return ""
    return re.sub(r"[\W_]+", "-", text.lower()).strip("-")


def count_words(text: str | None) -> int:
    if not text:
        return 0
    return len(text.split())


def safe_string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    # round() is banker's rounding; metrics round .5 upward
    return math.floor(value + 0.5)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def format_display_date(value: datetime, locale: str) -> str:
    language, _, region = (locale or "").replace("_", "-").partition("-")
    language = language.lower()
    if language in _DAY_FIRST_DOTTED:
        return f"{value.day}.{value.month}.{value.year}"
    if language == "en" and region.upper() in {"", "US"}:
        return f"{value.month}/{value.day}/{value.year}"
    return f"{value.day}/{value.month}/{value.year}"
