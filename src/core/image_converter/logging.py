from __future__ import annotations

import json
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class StageTimings:
    read_ms: float = 0.0
    convert_ms: float = 0.0
    write_ms: float = 0.0


@dataclass(slots=True)
class RequestLogEntry:
    request_id: str
    kind: str
    source: str
    status: str
    output_format: str
    error_code: str | None
    timings: StageTimings
    size_bytes: int
    report: dict[str, object] = field(default_factory=dict)
    failed_entries: list[str] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timings"] = asdict(self.timings)
        return payload


class RequestLogger:
    """Append-only JSON-lines log, one line per conversion request."""

    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file
        self._lock = threading.Lock()

    def append(self, entry: RequestLogEntry) -> None:
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._lock:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            with self._log_file.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
