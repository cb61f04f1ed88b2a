# flapper/game/leaderboard.py
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol
from .config import LEADERBOARD_KEY, HIGH_SCORE_KEY, LEADERBOARD_LIMIT

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """Process-local store, used by the environment and the tests."""
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(data or {})

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value


class JsonFileStore:
    """
    All keys live in one JSON object on disk. Last write wins.
    A missing, unreadable or corrupt file reads as empty.
    """
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.path}: expected a JSON object")
            return {}
        return data

    def get(self, key: str) -> Any:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Could not write {self.path}: {e}")


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    score: int
    timestamp: str


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _parse_entry(raw: Any) -> Optional[LeaderboardEntry]:
    if not isinstance(raw, dict):
        return None
    name = raw.get("name")
    score = raw.get("score")
    if not isinstance(name, str) or not name.strip():
        return None
    if isinstance(score, bool) or not isinstance(score, int):
        return None
    return LeaderboardEntry(name=name.strip(), score=score, timestamp=str(raw.get("timestamp", "")))


class LeaderboardStore:
    """
    Ranked score entries plus the all-time high score.

    Entries are kept sorted by descending score; equal scores keep their
    insertion order. The list is capped at LEADERBOARD_LIMIT and written
    back to the store after every change.
    """
    def __init__(self, store: KeyValueStore,
                 limit: int = LEADERBOARD_LIMIT,
                 clock: Callable[[], str] = _now_iso):
        self.store = store
        self.limit = int(limit)
        self.clock = clock
        self._entries: List[LeaderboardEntry] = []
        self._high_score = 0
        self.load()

    @property
    def entries(self) -> List[LeaderboardEntry]:
        return list(self._entries)

    @property
    def high_score(self) -> int:
        return self._high_score

    def load(self):
        """(Re)load from the store; anything malformed degrades to empty defaults."""
        try:
            raw_entries = self.store.get(LEADERBOARD_KEY)
            raw_high = self.store.get(HIGH_SCORE_KEY)
        except Exception as e:
            logger.warning(f"Leaderboard store unavailable, starting empty: {e}")
            raw_entries, raw_high = None, None

        entries: List[LeaderboardEntry] = []
        if isinstance(raw_entries, list):
            for raw in raw_entries:
                entry = _parse_entry(raw)
                if entry is not None:
                    entries.append(entry)
        elif raw_entries is not None:
            logger.warning("Ignoring malformed leaderboard data")
        # sorted() is stable, so stored tie order survives
        self._entries = sorted(entries, key=lambda e: -e.score)[: self.limit]

        if isinstance(raw_high, int) and not isinstance(raw_high, bool) and raw_high > 0:
            self._high_score = raw_high
        else:
            self._high_score = 0
        # the ledger can never be below its own best entry
        if self._entries:
            self._high_score = max(self._high_score, self._entries[0].score)

    def add(self, name: str, score: int) -> LeaderboardEntry:
        name = (name or "").strip()
        if not name:
            raise ValueError("leaderboard entries need a non-empty name")
        entry = LeaderboardEntry(name=name, score=int(score), timestamp=self.clock())

        # insert after every entry with a score >= ours (stable for ties)
        pos = len(self._entries)
        for i, e in enumerate(self._entries):
            if e.score < entry.score:
                pos = i
                break
        self._entries.insert(pos, entry)
        del self._entries[self.limit:]
        self._save_entries()
        return entry

    def rank_of_score(self, score: int) -> int:
        """1-based rank a new entry with `score` would get."""
        return 1 + sum(1 for e in self._entries if e.score >= score)

    def rank_of(self, name: str) -> Optional[int]:
        """1-based rank of the best entry under `name`, None if absent."""
        name = (name or "").strip()
        for i, e in enumerate(self._entries):
            if e.name == name:
                return i + 1
        return None

    def record_high_score(self, score: int) -> bool:
        """Raise the high score if beaten. Returns True on a new record."""
        if score <= self._high_score:
            return False
        self._high_score = int(score)
        self._safe_set(HIGH_SCORE_KEY, self._high_score)
        return True

    def _save_entries(self):
        self._safe_set(LEADERBOARD_KEY, [asdict(e) for e in self._entries])

    def _safe_set(self, key: str, value: Any):
        try:
            self.store.set(key, value)
        except Exception as e:
            logger.error(f"Failed to persist {key}: {e}")
