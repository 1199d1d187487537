from collections import defaultdict
import json
from typing import Dict, Iterable, Set

from ..IR.Classes import JField
from ..IR.IRStmts import Var
from . import json_utils
from .Objects import Obj
from .Pointers import InstanceFieldPtr, Pointer, StaticFieldPtr, VarPtr


class PointerFlowGraph:
    pointers: Dict[str, Pointer]                # every pointer created so far, keyed by id
    forward: Dict[Pointer, Set[Pointer]]

    def __init__(self):
        self.pointers = {}
        self.forward = defaultdict(set)

    # Pointers are memoized: the same key always yields the same instance,
    # so a pointer's points-to set is never re-created.
    def getVarPtr(self, var: Var) -> VarPtr:
        return self._get(VarPtr, VarPtr.generateID(var), var)

    def getStaticFieldPtr(self, field: JField) -> StaticFieldPtr:
        return self._get(StaticFieldPtr, StaticFieldPtr.generateID(field), field)

    def getInstanceFieldPtr(self, obj: Obj, field: JField) -> InstanceFieldPtr:
        return self._get(InstanceFieldPtr, InstanceFieldPtr.generateID(obj, field), obj, field)

    def _get(self, ptr_cls, id: str, *vararg):
        if(id in self.pointers):
            return self.pointers[id]
        else:
            ptr = ptr_cls(*vararg)
            self.pointers[id] = ptr
            return ptr

    def addEdge(self, source: Pointer, target: Pointer) -> bool:
        if(target not in self.forward[source]):
            self.forward[source].add(target)
            return True
        else:
            return False

    def hasEdge(self, source: Pointer, target: Pointer) -> bool:
        return source in self.forward and target in self.forward[source]

    def getSuccsOf(self, pointer: Pointer) -> Set[Pointer]:
        if(pointer not in self.forward):
            return set()
        return self.forward[pointer]

    def getPointers(self) -> Iterable[Pointer]:
        return self.pointers.values()

    def edgeCount(self) -> int:
        return sum(len(targets) for targets in self.forward.values())

    def to_json(self):
        forward = {str(ptr): s for ptr, s in self.forward.items()}
        backward = defaultdict(set)
        for src, s in self.forward.items():
            for des in s:
                backward[str(des)].add(src)
        return json.dumps(
                    {"forward": forward, "backward": backward},
                    default=json_utils.default,
                    indent=4)
