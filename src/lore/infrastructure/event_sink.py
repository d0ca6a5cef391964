import asyncio
import json
from collections import Counter
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class WikiApiEvent:
    """One MediaWiki request as seen by a single source's client."""

    source_id: str
    operation: str
    api_url: str
    params: dict[str, str]
    outcome: str
    status: int | None
    started_at: str
    finished_at: str
    error_type: str | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ApiEventJsonlSink:
    """Per-run JSONL log of wiki API requests with a per-source outcome tally."""

    def __init__(self, output_dir: str | Path, run_id: str) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.run_id = run_id
        self.file_path = self.output_dir / f"wiki_api_{run_id}.jsonl"
        self._lock = asyncio.Lock()
        self._handle = self.file_path.open("a", encoding="utf-8")
        self._closed = False
        self._outcomes: dict[str, Counter[str]] = {}

    @property
    def events_written(self) -> int:
        return sum(sum(counter.values()) for counter in self._outcomes.values())

    async def write_event(self, event: WikiApiEvent) -> None:
        line = json.dumps({"run_id": self.run_id, **event.to_dict()}, ensure_ascii=False)
        async with self._lock:
            if self._closed:
                raise RuntimeError("ApiEventJsonlSink is closed.")
            self._handle.write(line + "\n")
            self._handle.flush()
            self._outcomes.setdefault(event.source_id, Counter())[event.outcome] += 1

    def outcome_summary(self) -> dict[str, dict[str, int]]:
        """Outcome counts keyed by source id, e.g. ``{"coppermind": {"success": 2}}``."""
        return {source_id: dict(counter) for source_id, counter in sorted(self._outcomes.items())}

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._handle.close()
