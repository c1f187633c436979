"""JSONL event logging for observability."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    event: str
    user_id: str | None = None
    conversation_id: str | None = None
    trigger_type: str | None = None
    duration_ms: float | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


class JSONLLogger:
    """Logger that writes structured events in JSONL format."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "events.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".whimcraft" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: LogEntry) -> None:
        """Write a log entry to the file."""
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False, default=str) + "\n")

    def log(
        self,
        event: str,
        *,
        user_id: str | None = None,
        conversation_id: str | None = None,
        trigger_type: str | None = None,
        duration_ms: float | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            user_id=user_id,
            conversation_id=conversation_id,
            trigger_type=trigger_type,
            duration_ms=duration_ms,
            error=error,
            extra=extra if extra else {},
        )
        self._write(entry)

    def log_trigger(
        self,
        trigger_type: str,
        success: bool,
        *,
        user_id: str | None = None,
        conversation_id: str | None = None,
        duration_ms: float | None = None,
        error: str | None = None,
    ) -> None:
        """Log a keyword trigger execution."""
        self.log(
            "trigger_executed",
            user_id=user_id,
            conversation_id=conversation_id,
            trigger_type=trigger_type,
            duration_ms=duration_ms,
            error=error if not success else None,
            success=success,
        )

    def log_context_prepared(
        self,
        model_name: str,
        *,
        user_id: str | None = None,
        conversation_id: str | None = None,
        duration_ms: float | None = None,
        search_results: int | None = None,
        memories: int | None = None,
        rate_limited: bool = False,
    ) -> None:
        """Log a finished context preparation."""
        self.log(
            "context_prepared",
            user_id=user_id,
            conversation_id=conversation_id,
            duration_ms=duration_ms,
            model_name=model_name,
            search_results=search_results,
            memories=memories,
            rate_limited=rate_limited,
        )

    def log_search_usage(
        self,
        query: str,
        results_count: int,
        cost_estimate: float,
        *,
        user_id: str | None = None,
    ) -> None:
        """Log a tracked web search."""
        self.log(
            "search_usage",
            user_id=user_id,
            query=query,
            results_count=results_count,
            cost_estimate=cost_estimate,
        )


# Global logger instance
_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
