"""
Shared helpers for the skill catalog.
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def normalize_name(name: str) -> str:
    """
    Normalize a skill or category name: lowercase, hyphens, max 64 chars.

    Examples:
        "Tools & Productivity" -> "tools-productivity"
        "LangChain" -> "langchain"
        "My Skill Name" -> "my-skill-name"
    """
    if not name:
        return "unknown"
    name = re.sub(r'[^a-z0-9]+', '-', str(name).lower())
    name = re.sub(r'-+', '-', name).strip('-')
    return name[:64] if name else "unknown"


def normalize_repo(repo: str) -> str:
    """Normalize GitHub repo to owner/repo format."""
    repo = (repo or "").strip()
    if repo.startswith("https://github.com/"):
        repo = repo[len("https://github.com/"):]
    return repo.strip("/")


def split_repo(repo: str) -> tuple:
    """Split "owner/repo" (or a GitHub URL) into (owner, repo)."""
    repo = normalize_repo(repo)
    if "/" not in repo:
        raise ValueError(f"Expected owner/repo, got {repo!r}")
    owner, name = repo.split("/", 1)
    return owner, name.split("/", 1)[0]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Missing or unparseable values map to the epoch so they sort oldest.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return EPOCH
    else:
        return EPOCH

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def json_safe(value: Any) -> Any:
    """Convert YAML-native values (dates, sets, non-str keys) into JSON-compatible ones."""
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [json_safe(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def as_text(value: Any) -> Optional[str]:
    """Return a stripped string for scalar front-matter values, None for empty ones."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None
