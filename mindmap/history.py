"""
Undo/redo history of graph snapshots.

Graphs are immutable values, so a snapshot is just a reference; nothing is
copied. The stack is linear: pushing after an undo drops the redo states.
"""

import logging
from typing import List, Optional

from mindmap.constants import HISTORY_SIZE
from mindmap.graph import Graph

logger = logging.getLogger(__name__)


class GraphHistory:
    """Bounded undo/redo stack. The newest entry is the current graph."""

    def __init__(self, initial: Graph, max_size: int = HISTORY_SIZE):
        if max_size < 1:
            raise ValueError("History size must be at least 1")
        self.max_size = max_size
        self._entries: List[Graph] = [initial]
        self._index = 0

    @property
    def current(self) -> Graph:
        return self._entries[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, graph: Graph) -> None:
        """Record a committed graph. Snapshots equal to the current one are skipped."""
        if graph == self.current:
            return
        self._entries = self._entries[: self._index + 1]
        self._entries.append(graph)
        if len(self._entries) > self.max_size:
            self._entries = self._entries[-self.max_size:]
        self._index = len(self._entries) - 1

    def reset(self, graph: Graph) -> None:
        """Forget everything and start over from ``graph``."""
        self._entries = [graph]
        self._index = 0

    def undo(self) -> Optional[Graph]:
        if not self.can_undo:
            return None
        self._index -= 1
        logger.debug(f"Undo -> entry {self._index} of {len(self._entries)}")
        return self.current

    def redo(self) -> Optional[Graph]:
        if not self.can_redo:
            return None
        self._index += 1
        logger.debug(f"Redo -> entry {self._index} of {len(self._entries)}")
        return self.current
