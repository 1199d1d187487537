from collections import deque
import logging
from typing import Set

from ..IR.Classes import JClass, JMethod
from ..IR.IRStmts import CallKind, Invoke
from ..IR.Program import Program
from ..PTA.CallGraph import CallGraph, Edge

logger = logging.getLogger(__name__)


class CHABuilder:
    """
    Build a call graph by class hierarchy analysis. Receivers are not
    tracked, so a virtual call reaches every override below the declared
    class. The result over-approximates the pointer analysis call graph.
    """

    def __init__(self, program: Program, entry: JMethod = None):
        self.program = program
        self.hierarchy = program.getClassHierarchy()
        self.entry = entry

    def build(self) -> CallGraph:
        callgraph = CallGraph()
        entry = self.entry if self.entry is not None else self.program.getMainMethod()
        if(entry is None):
            logger.warning("No entry method, the call graph is empty.")
            return callgraph
        callgraph.addEntryMethod(entry)

        workList = deque([entry])
        while(len(workList) > 0):
            method = workList.popleft()
            if(not callgraph.addReachableMethod(method)):
                continue
            for callSite in callgraph.callSitesIn(method):
                for callee in self.resolve(callSite):
                    callgraph.addEdge(Edge(callSite.kind, callSite, callee))
                    workList.append(callee)

        logger.info("CHA found %d reachable methods and %d call edges",
                    len(callgraph.reachableMethods), callgraph.edgeCount())
        return callgraph

    def resolve(self, callSite: Invoke) -> Set[JMethod]:
        targets = set()
        methodRef = callSite.methodRef
        declaringClass = self.hierarchy.getClass(methodRef.declaringClass)
        if(declaringClass is None):
            logger.debug("Unknown class %s at %s", methodRef.declaringClass, callSite)
            return targets

        if(callSite.kind == CallKind.STATIC or callSite.kind == CallKind.SPECIAL):
            method = self.hierarchy.dispatch(declaringClass, methodRef.subsignature)
            if(method is not None):
                targets.add(method)

        elif(callSite.kind == CallKind.VIRTUAL or callSite.kind == CallKind.INTERFACE):
            for jclass in self.subtypesOf(declaringClass):
                method = self.hierarchy.dispatch(jclass, methodRef.subsignature)
                if(method is not None):
                    targets.add(method)

        else:
            logger.debug("Call kind %s is not resolved at %s", callSite.kind.value, callSite)
        return targets

    # declaringClass and all its transitive subclasses, implementors and subinterfaces
    def subtypesOf(self, declaringClass: JClass) -> Set[JClass]:
        visited = {declaringClass}
        queue = deque([declaringClass])
        while(len(queue) > 0):
            jclass = queue.popleft()
            if(jclass.isInterface()):
                subtypes = self.hierarchy.getDirectImplementorsOf(jclass) + \
                           self.hierarchy.getDirectSubinterfacesOf(jclass)
            else:
                subtypes = self.hierarchy.getDirectSubclassesOf(jclass)
            for subtype in subtypes:
                if(subtype not in visited):
                    visited.add(subtype)
                    queue.append(subtype)
        return visited
