"""Per-stage retry accounting kept on the state value.

Only the graph's regeneration step calls increment_retry; stages never touch
their own counters.
"""
from typing import Any, Dict

from .stages import StageId

DEFAULT_MAX_RETRIES = 3


def retry_count(state, stage: StageId | str) -> int:
    return (state.get("retry_count") or {}).get(StageId(stage).value, 0)


def can_retry(state, stage: StageId | str, max_retries: int = DEFAULT_MAX_RETRIES) -> bool:
    return retry_count(state, stage) < max_retries


def increment_retry(state, stage: StageId | str) -> Dict[str, Any]:
    """Update bumping one stage's counter; merged with merge_retry_counts."""
    key = StageId(stage).value
    return {"retry_count": {key: retry_count(state, key) + 1}}
