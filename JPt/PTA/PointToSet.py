from typing import Iterable, Iterator, Set

from .Objects import Obj


class PointsToSet:
    objs: Set[Obj]

    def __init__(self, objs: Iterable[Obj] = ()):
        self.objs = set(objs)

    def contains(self, obj: Obj) -> bool:
        return obj in self.objs

    def addObject(self, obj: Obj) -> bool:
        if(obj not in self.objs):
            self.objs.add(obj)
            return True
        else:
            return False

    # add all objects of other, return those that were not here yet
    def union(self, other: 'PointsToSet') -> 'PointsToSet':
        diff = other.objs - self.objs
        self.objs |= diff
        return PointsToSet(diff)

    def isEmpty(self) -> bool:
        return len(self.objs) == 0

    def getObjects(self) -> Set[Obj]:
        return self.objs

    def __contains__(self, obj):
        return obj in self.objs

    def __iter__(self) -> Iterator[Obj]:
        return iter(self.objs)

    def __len__(self):
        return len(self.objs)

    def __str__(self):
        return "{" + ", ".join(sorted(str(obj) for obj in self.objs)) + "}"

    def __repr__(self):
        return f"PointsToSet: {self}"
