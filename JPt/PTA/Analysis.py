from collections import deque
import logging
from typing import Deque, Dict, Optional

from ..IR.Classes import JField, JMethod
from ..IR.IRStmts import CallKind, Copy, Invoke, IRStmt, LoadArray, LoadField, New, Return, StoreArray, StoreField, Var
from ..IR.Program import Program
from .CallGraph import CallGraph, Edge
from .HeapModel import AllocationSiteHeapModel
from .Objects import Obj
from .PointerFlow import PointerFlowGraph
from .Pointers import Pointer, VarPtr
from .PointToSet import PointsToSet
from .Result import PointerAnalysisResult
from .WorkList import WorkList

logger = logging.getLogger(__name__)


class Analysis:
    """
    Context-insensitive, inclusion-based pointer analysis that builds the
    call graph on the fly.

    Points-to facts flow along the pointer flow graph. Field, array and
    instance call statements are handled when their base variable gains a
    new object, which in turn may add edges and reachable methods.
    """
    program: Program
    heapModel: AllocationSiteHeapModel
    pointerFlow: PointerFlowGraph
    callgraph: CallGraph
    workList: WorkList
    newMethods: Deque[JMethod]
    resolvedFields: Dict[int, Optional[JField]]

    def __init__(self, program: Program, entry: JMethod = None, verbose=False):
        self.program = program
        self.hierarchy = program.getClassHierarchy()
        self.heapModel = AllocationSiteHeapModel(program)
        self.entry = entry
        self.verbose = verbose

        self.pointerFlow = PointerFlowGraph()
        self.callgraph = CallGraph()
        self.workList = WorkList()
        self.newMethods = deque()
        self.processingMethods = False
        self.resolvedFields = {}

        self.processStmts = {
            New: self.processNew,
            Copy: self.processCopy,
            LoadField: self.processLoadField,
            StoreField: self.processStoreField,
            Invoke: self.processInvoke,
            # handled when the base variable gets new objects
            LoadArray: None,
            StoreArray: None,
            Return: None,
        }

    def solve(self) -> PointerAnalysisResult:
        self.initialize()
        self.analyze()
        return self.getResult()

    def initialize(self):
        entry = self.entry if self.entry is not None else self.program.getMainMethod()
        if(entry is None):
            logger.warning("No entry method, nothing to analyze.")
            return
        logger.info("Start pointer analysis from %s", entry)
        self.callgraph.addEntryMethod(entry)
        self.addReachable(entry)

    def addReachable(self, method: JMethod):
        if(not self.callgraph.addReachableMethod(method)):
            return
        logger.debug("New reachable method %s", method)
        self.newMethods.append(method)

        # process bodies iteratively, a static call chain could be arbitrarily deep
        if(self.processingMethods):
            return
        self.processingMethods = True
        try:
            while(len(self.newMethods) > 0):
                newMethod = self.newMethods.popleft()
                for stmt in newMethod.getStmts():
                    self.processStmt(stmt)
        finally:
            self.processingMethods = False

    def processStmt(self, stmt: IRStmt):
        try:
            process = self.processStmts[type(stmt)]
        except KeyError:
            logger.debug("Skip statement of unknown kind: %s", stmt)
            return
        if(process is not None):
            process(stmt)

    def processNew(self, stmt: New):
        obj = self.heapModel.getObj(stmt)
        varPtr = self.pointerFlow.getVarPtr(stmt.lvalue)
        self.workList.addEntry(varPtr, PointsToSet([obj]))

    def processCopy(self, stmt: Copy):
        self.addPFGEdge(self.pointerFlow.getVarPtr(stmt.rvalue),
                        self.pointerFlow.getVarPtr(stmt.lvalue))

    def processLoadField(self, stmt: LoadField):
        if(not stmt.isStatic()):
            return
        field = self.resolveField(stmt)
        if(field is None):
            return
        self.addPFGEdge(self.pointerFlow.getStaticFieldPtr(field),
                        self.pointerFlow.getVarPtr(stmt.lvalue))

    def processStoreField(self, stmt: StoreField):
        if(not stmt.isStatic()):
            return
        field = self.resolveField(stmt)
        if(field is None):
            return
        self.addPFGEdge(self.pointerFlow.getVarPtr(stmt.rvalue),
                        self.pointerFlow.getStaticFieldPtr(field))

    def processInvoke(self, stmt: Invoke):
        if(not stmt.isStatic()):
            return
        callee = self.resolveCallee(None, stmt)
        if(callee is None):
            logger.debug("Unresolved static call %s in %s", stmt, stmt.method)
            return
        self.processCallEdge(Edge(CallKind.STATIC, stmt, callee))

    def addPFGEdge(self, source: Pointer, target: Pointer):
        if(self.pointerFlow.addEdge(source, target)):
            pointsToSet = source.getPointsToSet()
            # objects that reached source before this edge existed
            if(not pointsToSet.isEmpty()):
                self.workList.addEntry(target, PointsToSet(pointsToSet))

    def analyze(self):
        while(not self.workList.isEmpty()):

            if(self.verbose):
                print(f"PTA worklist remains {len(self.workList):<10} to process.                \r", end="")

            pointer, pointsToSet = self.workList.pollEntry()
            delta = self.propagate(pointer, pointsToSet)
            if(delta.isEmpty()):
                continue

            if(not isinstance(pointer, VarPtr)):
                continue
            var = pointer.getVar()
            for obj in delta:
                for stmt in var.getStoreFields():
                    field = self.resolveField(stmt)
                    if(field is not None):
                        self.addPFGEdge(self.pointerFlow.getVarPtr(stmt.rvalue),
                                        self.pointerFlow.getInstanceFieldPtr(obj, field))

                for stmt in var.getLoadFields():
                    field = self.resolveField(stmt)
                    if(field is not None):
                        self.addPFGEdge(self.pointerFlow.getInstanceFieldPtr(obj, field),
                                        self.pointerFlow.getVarPtr(stmt.lvalue))

                # array elements collapse onto the base variable
                for stmt in var.getStoreArrays():
                    self.addPFGEdge(self.pointerFlow.getVarPtr(stmt.rvalue),
                                    self.pointerFlow.getVarPtr(stmt.base))

                for stmt in var.getLoadArrays():
                    self.addPFGEdge(self.pointerFlow.getVarPtr(stmt.base),
                                    self.pointerFlow.getVarPtr(stmt.lvalue))

                self.processCall(var, obj)

        logger.info("Pointer analysis reached fixed point: %d reachable methods, %d pointers, "
                    "%d pointer flow edges, %d call edges",
                    len(self.callgraph.reachableMethods), len(self.pointerFlow.pointers),
                    self.pointerFlow.edgeCount(), self.callgraph.edgeCount())

    # Add pointsToSet to pt(pointer), push the difference to pointer's successors
    # and return it.
    def propagate(self, pointer: Pointer, pointsToSet: PointsToSet) -> PointsToSet:
        delta = pointer.getPointsToSet().union(pointsToSet)
        if(not delta.isEmpty()):
            for succ in list(self.pointerFlow.getSuccsOf(pointer)):
                self.workList.addEntry(succ, delta)
        return delta

    def processCall(self, var: Var, recv: Obj):
        for invoke in var.getInvokes():
            callee = self.resolveCallee(recv, invoke)
            if(callee is None):
                logger.debug("Unresolved call %s on %s", invoke, recv)
                continue
            thisVar = callee.getThis()
            if(thisVar is not None):
                self.workList.addEntry(self.pointerFlow.getVarPtr(thisVar), PointsToSet([recv]))
            self.processCallEdge(Edge(invoke.kind, invoke, callee))

    def processCallEdge(self, edge: Edge):
        if(not self.callgraph.addEdge(edge)):
            return
        invoke, callee = edge.callSite, edge.callee
        self.addReachable(callee)

        # arity mismatches only bind the pairs that exist
        for arg, param in zip(invoke.args, callee.getParams()):
            self.addPFGEdge(self.pointerFlow.getVarPtr(arg),
                            self.pointerFlow.getVarPtr(param))

        lvalue = invoke.getLValue()
        if(lvalue is not None):
            lvaluePtr = self.pointerFlow.getVarPtr(lvalue)
            for returnVar in callee.getReturnVars():
                self.addPFGEdge(self.pointerFlow.getVarPtr(returnVar), lvaluePtr)

    def resolveCallee(self, recv: Optional[Obj], callSite: Invoke) -> Optional[JMethod]:
        type = recv.getType() if recv is not None else None
        return self.hierarchy.resolveCallee(type, callSite)

    def resolveField(self, stmt) -> Optional[JField]:
        key = id(stmt)
        if(key not in self.resolvedFields):
            field = self.hierarchy.resolveField(stmt.fieldRef)
            if(field is None):
                logger.debug("Unresolved field %s in %s", stmt.fieldRef, stmt.method)
            self.resolvedFields[key] = field
        return self.resolvedFields[key]

    def getResult(self) -> PointerAnalysisResult:
        return PointerAnalysisResult(self.pointerFlow, self.callgraph, self.heapModel)
