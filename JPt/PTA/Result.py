import json
from typing import Dict, Iterable, List

from ..IR.Classes import JMethod
from ..IR.IRStmts import Var
from . import json_utils
from .CallGraph import CallGraph
from .HeapModel import AllocationSiteHeapModel
from .Objects import Obj
from .PointerFlow import PointerFlowGraph
from .Pointers import Pointer, VarPtr
from .PointToSet import PointsToSet


class PointerAnalysisResult:
    """Read-only view over a finished solve."""
    pointerFlow: PointerFlowGraph
    callgraph: CallGraph
    heapModel: AllocationSiteHeapModel

    def __init__(self, pointerFlow: PointerFlowGraph, callgraph: CallGraph, heapModel: AllocationSiteHeapModel):
        self.pointerFlow = pointerFlow
        self.callgraph = callgraph
        self.heapModel = heapModel

    def getPointers(self) -> Iterable[Pointer]:
        return self.pointerFlow.getPointers()

    def getVars(self) -> List[Var]:
        return [ptr.getVar() for ptr in self.getPointers() if isinstance(ptr, VarPtr)]

    def getObjects(self) -> List[Obj]:
        return list(self.heapModel.getObjects())

    def getPointsToSetOf(self, pointer: Pointer) -> PointsToSet:
        ptr = self.pointerFlow.pointers.get(pointer.id)
        return ptr.getPointsToSet() if ptr is not None else PointsToSet()

    # variables the analysis never saw point to nothing
    def getPointsToSet(self, var: Var) -> PointsToSet:
        ptr = self.pointerFlow.pointers.get(VarPtr.generateID(var))
        return ptr.getPointsToSet() if ptr is not None else PointsToSet()

    def getCallGraph(self) -> CallGraph:
        return self.callgraph

    def getPointerFlowGraph(self) -> PointerFlowGraph:
        return self.pointerFlow

    def isReachable(self, method: JMethod) -> bool:
        return self.callgraph.contains(method)

    def pointsToSets(self) -> Dict[str, PointsToSet]:
        return {str(ptr): ptr.getPointsToSet() for ptr in self.getPointers()
                    if not ptr.getPointsToSet().isEmpty()}

    def pointsToJson(self):
        return json.dumps(self.pointsToSets(), default=json_utils.default, indent=4)
