from collections import deque
from typing import Deque, NamedTuple, Optional

from .Pointers import Pointer
from .PointToSet import PointsToSet


class Entry(NamedTuple):
    pointer: Pointer
    pointsToSet: PointsToSet


# Entries for the same pointer are not merged here: the solver always
# diffs against the pointer's current set when it polls one.
class WorkList:
    entries: Deque[Entry]

    def __init__(self):
        self.entries = deque()

    def addEntry(self, pointer: Pointer, pointsToSet: PointsToSet):
        self.entries.append(Entry(pointer, pointsToSet))

    def pollEntry(self) -> Optional[Entry]:
        if(len(self.entries) == 0):
            return None
        return self.entries.popleft()

    def isEmpty(self) -> bool:
        return len(self.entries) == 0

    def __len__(self):
        return len(self.entries)
