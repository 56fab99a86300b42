import re
import json
from typing import Any, Optional


def clean_md(text: str) -> str:
    """
    Sanitize markdown artifacts from text.
    Removes:
    - Leading headers (#, ##)
    - Bold markers (**, __)
    - Leading bullets (-, *, •) and list numbers (1., 2))
    """
    if not text:
        return ""

    # Remove bolding (**text** -> text)
    text = re.sub(r"(\*\*|__)(.*?)\1", r"\2", text)

    # Remove leading headers (# Title -> Title)
    text = re.sub(r"^\s*#+\s+", "", text)

    # Remove leading bullets (- Item -> Item)
    text = re.sub(r"^\s*[-*•]\s+", "", text)

    # Remove list numbering (1. Item / 2) Item -> Item)
    text = re.sub(r"^\s*\d+[.)]\s+", "", text)

    return text.strip()


def basic_caption_cleanup(raw: str) -> str:
    """
    Deterministic caption cleanup used when the model is unavailable.
    Drops timestamps ([00:15], (0:30), 1:05) and upper-case speaker labels,
    then collapses whitespace.
    """
    if not raw or not raw.strip():
        return ""

    s = re.sub(r"\(\d{1,2}:\d{2}\)", "", raw)
    s = re.sub(r"\[?\d{1,2}:\d{2}\]?", "", s)
    s = re.sub(r"^\s*(?:SPEAKER\s*\d+|[A-Z][A-Z ]*)\s*:", "", s, flags=re.MULTILINE)
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def strip_code_fences(text: str) -> str:
    """```json ... ``` -> inner text."""
    if not text:
        return ""
    s = text.strip()
    m = re.match(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", s, flags=re.DOTALL)
    if m:
        return m.group(1).strip()
    return s


def extract_json_object(text: str) -> Optional[dict[str, Any]]:
    """
    Parse the first JSON object in a model response.
    Returns None when nothing parseable is found.
    """
    s = strip_code_fences(text)
    if not s:
        return None

    try:
        data = json.loads(s)
        return data if isinstance(data, dict) else None
    except json.JSONDecodeError:
        pass

    start = s.find("{")
    end = s.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        data = json.loads(s[start:end + 1])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def clean_string_list(value: Any) -> list[str]:
    """Keep non-blank strings from a model-provided list."""
    if not isinstance(value, list):
        return []
    items = []
    for v in value:
        if not isinstance(v, str):
            continue
        cleaned = clean_md(v)
        if cleaned:
            items.append(cleaned)
    return items


def preview(text: str, length: int = 80) -> str:
    """Short single-line preview for log messages."""
    s = re.sub(r"\s+", " ", text or "").strip()
    if len(s) <= length:
        return s
    return s[:length - 1].rstrip() + "…"
