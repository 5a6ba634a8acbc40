"""Static fallback dataset used when no upstream credential is configured."""

import json
from pathlib import Path
from typing import Any


def load_sample_photos(path: Path) -> dict[str, Any]:
    """Read the dataset fresh from disk; returns a dict with a `results` list."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        data = {"results": data if isinstance(data, list) else []}
    if not isinstance(data.get("results"), list):
        data["results"] = []
    return data


def _matches(photo: dict[str, Any], needle: str) -> bool:
    alt = (photo.get("alt_description") or "").lower()
    photo_id = str(photo.get("id") or "").lower()
    return needle in alt or needle in photo_id


def search_sample_photos(data: dict[str, Any], query: str) -> dict[str, Any]:
    """Case-insensitive substring match on alt_description or id."""
    needle = query.lower()
    return {**data, "results": [p for p in data["results"] if _matches(p, needle)]}


def take_sample_photos(data: dict[str, Any], count: int) -> dict[str, Any]:
    return {**data, "results": data["results"][:count]}
