import json
import os
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class JSONLLogger:
    """Simple JSONL logger for pipeline diagnostics."""

    def __init__(self, log_path: str = "logs/pipeline_runs.jsonl", truncate: bool = True):
        self.log_path = log_path
        self._lock = threading.Lock()
        self.run_log: List[Dict] = []

        log_dir = os.path.dirname(log_path)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)
        if truncate and os.path.exists(self.log_path):
            with open(self.log_path, "w", encoding="utf-8"):
                pass

    def log(self, payload: Dict[str, Any]) -> None:
        """Write a payload as a JSON line with timestamp metadata."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **payload,
        }
        # JSONL for easier parsing
        serialized = json.dumps(entry, default=self._fallback_serializer)
        with self._lock:
            with open(self.log_path, "a", encoding="utf-8") as log_file:
                log_file.write(serialized + "\n")

    @staticmethod
    def _fallback_serializer(obj: Any) -> Any:
        """Ensure non-serializable objects degrade gracefully."""
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        if isinstance(obj, bytes):
            return f"<{len(obj)} bytes>"
        try:
            return str(obj)
        except Exception:
            return repr(obj)

    def _record(self, payload: Dict[str, Any]) -> None:
        self.log(payload=payload)
        with self._lock:
            self.run_log.append(payload)

    def log_stage_invocation(
        self,
        run_id: str,
        stage: str,
        duration: float,
        produced: List[str],
        errors: List[Any]) -> None:

        self._record({
            "run_id": run_id,
            "stage": stage,
            "event": "stage_invocation",
            "duration_seconds": round(duration, 4),
            "produced": produced,
            "errors": errors,
        })

    def log_stage_skipped(self, run_id: str, stage: str, reason: str) -> None:
        self._record({
            "run_id": run_id,
            "stage": stage,
            "event": "stage_skipped",
            "reason": reason,
        })

    def log_routing_decision(self, run_id: str, edge: str, decision: str) -> None:
        self._record({
            "run_id": run_id,
            "event": "routing_decision",
            "edge": edge,
            "decision": decision,
        })

    def log_pipeline_error(self, run_id: str, stage: Optional[str], error_message: str, traceback: str) -> None:
        self._record({
            "run_id": run_id,
            "stage": stage,
            "event": "pipeline_error",
            "error_message": error_message,
            "traceback": traceback,
        })

    def log_run_summary(self, run_id: str, summary: Dict[str, Any]) -> None:
        self.log(payload={
            "run_id": run_id,
            "event": "run_summary",
            **summary,
        })

    def get_run_log(self, run_id: Optional[str] = None) -> List[Dict]:
        with self._lock:
            return [entry for entry in self.run_log if run_id is None or entry.get("run_id") == run_id]
