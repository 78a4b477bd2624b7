import time
from typing import List, Optional

from referee.models import MatchHistoryEntry, MatchState


class MatchHistory:
    """
    Append-only undo stack of match states.

    - record() stores the state held *before* a point is applied
    - undo() walks back one step per call
    - No redo
    """

    def __init__(self):
        self._entries: List[MatchHistoryEntry] = []

    def record(self, state: MatchState, timestamp: Optional[float] = None) -> MatchHistoryEntry:
        if timestamp is None:
            timestamp = time.time()

        entry = MatchHistoryEntry(state=state, timestamp=timestamp)
        self._entries.append(entry)
        return entry

    def undo(self) -> Optional[MatchState]:
        """
        Pop the most recent entry and return its state.
        Returns None when there is nothing to undo.
        """
        if not self._entries:
            return None

        return self._entries.pop().state

    def clear(self):
        self._entries = []

    def entries(self) -> List[MatchHistoryEntry]:
        return list(self._entries)

    @property
    def can_undo(self) -> bool:
        return bool(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
