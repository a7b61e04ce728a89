# stores.py
# Persistence for the best score and the top-10 highscore list.

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Protocol

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

MAX_HIGHSCORES = 10

class HighscoreEntry(BaseModel):
    """A finished game's score and the date it was played."""
    score: int = Field(..., ge=0)
    date: str

_ENTRIES = TypeAdapter(List[HighscoreEntry])

class ScoreStore(Protocol):
    def get_best_score(self) -> int: ...

    def set_best_score(self, score: int) -> None: ...

class HighscoreStore(Protocol):
    def record_score(self, score: int, date: str) -> None: ...

    def get_highscores(self) -> List[HighscoreEntry]: ...

def rank_highscores(entries: List[HighscoreEntry], limit: int = MAX_HIGHSCORES) -> List[HighscoreEntry]:
    """
    Sorts entries by score descending and keeps the first `limit`.
    Equal scores keep their insertion order.
    """
    return sorted(entries, key=lambda entry: entry.score, reverse=True)[:limit]

# --- In-memory stores ---

class InMemoryScoreStore:
    def __init__(self, best_score: int = 0):
        self._best_score = best_score

    def get_best_score(self) -> int:
        return self._best_score

    def set_best_score(self, score: int) -> None:
        self._best_score = score

class InMemoryHighscoreStore:
    def __init__(self, limit: int = MAX_HIGHSCORES):
        self.limit = limit
        self._entries: List[HighscoreEntry] = []

    def record_score(self, score: int, date: str) -> None:
        self._entries = rank_highscores(self._entries + [HighscoreEntry(score=score, date=date)], self.limit)

    def get_highscores(self) -> List[HighscoreEntry]:
        return list(self._entries)

# --- JSON file stores ---

def _read_json(path: Path, default):
    """Reads a JSON file, returning `default` when it is missing or unreadable."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable store file %s: %s", path, e)
        return default

def _write_json(path: Path, data) -> None:
    """Writes through a temporary file in the same directory so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise

class JsonFileScoreStore:
    """Best score kept as a single integer in a JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_best_score(self) -> int:
        value = _read_json(self.path, 0)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning("Ignoring invalid best score in %s: %r", self.path, value)
            return 0
        return value

    def set_best_score(self, score: int) -> None:
        _write_json(self.path, score)

class JsonFileHighscoreStore:
    """
    Highscores kept as a JSON list of {"score", "date"} objects.
    The list is trimmed to the top entries every time a score is recorded.
    """

    def __init__(self, path: Path, limit: int = MAX_HIGHSCORES):
        self.path = Path(path)
        self.limit = limit

    def get_highscores(self) -> List[HighscoreEntry]:
        raw = _read_json(self.path, [])
        try:
            entries = _ENTRIES.validate_python(raw)
        except ValidationError as e:
            logger.warning("Ignoring invalid highscores in %s: %s", self.path, e)
            return []
        return rank_highscores(entries, self.limit)

    def record_score(self, score: int, date: str) -> None:
        entries = rank_highscores(self.get_highscores() + [HighscoreEntry(score=score, date=date)], self.limit)
        _write_json(self.path, [entry.model_dump() for entry in entries])
        logger.debug("Recorded highscore %d (%s) in %s", score, date, self.path)
