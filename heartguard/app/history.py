"""
Session History
================
Bounded, newest-first record of the predictions made in this session.
In memory only; it goes away with the process.
"""

from __future__ import annotations

from typing import Iterator, Optional

import pandas as pd

from heartguard.app.schemas import PredictionResult

HISTORY_SIZE = 5

HISTORY_COLUMNS = [
    "id", "timestamp", "prediction", "risk_level", "confidence",
    "age", "bp", "cholesterol",
]


class HistoryStore:
    """Keeps the ``capacity`` most recent results, newest first."""

    def __init__(self, capacity: int = HISTORY_SIZE):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._entries: list[PredictionResult] = []

    def record(self, result: PredictionResult) -> None:
        self._entries.insert(0, result)
        del self._entries[self.capacity:]

    def all(self) -> tuple[PredictionResult, ...]:
        return tuple(self._entries)

    @property
    def latest(self) -> Optional[PredictionResult]:
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PredictionResult]:
        return iter(self.all())

    def to_frame(self) -> pd.DataFrame:
        """Return the history as a DataFrame, one row per entry."""
        rows = [
            {
                "id": r.id,
                "timestamp": r.timestamp,
                "prediction": r.prediction_label,
                "risk_level": r.risk_level,
                "confidence": r.confidence_text,
                "age": r.source_snapshot.get("age", ""),
                "bp": r.source_snapshot.get("bp", ""),
                "cholesterol": r.source_snapshot.get("cholesterol", ""),
            }
            for r in self._entries
        ]
        return pd.DataFrame(rows, columns=HISTORY_COLUMNS)
