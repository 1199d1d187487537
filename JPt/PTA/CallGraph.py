import json
from typing import Dict, List, Set

from ..IR.Classes import JMethod
from ..IR.IRStmts import CallKind, Invoke
from . import json_utils


class Edge:
    kind: CallKind
    callSite: Invoke
    callee: JMethod

    def __init__(self, kind: CallKind, callSite: Invoke, callee: JMethod):
        self.kind = kind
        self.callSite = callSite
        self.callee = callee

    # the kind is not part of the identity, one edge per (call site, callee)
    def __eq__(self, other):
        return isinstance(other, Edge) and self.callSite is other.callSite and self.callee == other.callee

    def __hash__(self):
        return hash((id(self.callSite), self.callee))

    def __repr__(self):
        return f"Edge: [{self.kind.value}] {self.callSite.method}[{self.callSite.index}] -> {self.callee}"


class CallGraph:
    entryMethods: List[JMethod]
    reachableMethods: Dict[JMethod, None]               # insertion ordered set
    callgraph: Dict[Invoke, Set[Edge]]                  # call site -> out edges
    callers: Dict[JMethod, Set[Edge]]                   # callee -> in edges

    def __init__(self):
        self.entryMethods = []
        self.reachableMethods = {}
        self.callgraph = {}
        self.callers = {}

    def addEntryMethod(self, method: JMethod):
        if(method not in self.entryMethods):
            self.entryMethods.append(method)

    def addReachableMethod(self, method: JMethod) -> bool:
        if(method in self.reachableMethods):
            return False
        self.reachableMethods[method] = None
        return True

    def contains(self, method: JMethod) -> bool:
        return method in self.reachableMethods

    def addEdge(self, edge: Edge) -> bool:
        if(edge.callSite not in self.callgraph):
            self.callgraph[edge.callSite] = set()
        if(edge not in self.callgraph[edge.callSite]):
            self.callgraph[edge.callSite].add(edge)
            self.callers.setdefault(edge.callee, set()).add(edge)
            return True
        else:
            return False

    def getEntryMethods(self) -> List[JMethod]:
        return self.entryMethods

    def getReachableMethods(self) -> List[JMethod]:
        return list(self.reachableMethods)

    def edgesOutOf(self, callSite: Invoke) -> Set[Edge]:
        if(callSite not in self.callgraph):
            return set()
        return self.callgraph[callSite]

    def edgesInto(self, method: JMethod) -> Set[Edge]:
        return self.callers.get(method, set())

    def getCalleesOf(self, callSite: Invoke) -> Set[JMethod]:
        return {edge.callee for edge in self.edgesOutOf(callSite)}

    def getCallersOf(self, method: JMethod) -> Set[Invoke]:
        return {edge.callSite for edge in self.edgesInto(method)}

    def callSitesIn(self, method: JMethod) -> List[Invoke]:
        return [stmt for stmt in method.getStmts() if isinstance(stmt, Invoke)]

    def edges(self) -> List[Edge]:
        return [edge for edges in self.callgraph.values() for edge in edges]

    def edgeCount(self) -> int:
        return sum(len(edges) for edges in self.callgraph.values())

    def foldToStmt(self) -> Dict[JMethod, Dict[Invoke, Set[JMethod]]]:
        callgraph = {}
        for stmt, edges in self.callgraph.items():
            caller = stmt.method
            if(caller not in callgraph):
                callgraph[caller] = {}
            callgraph[caller][stmt] = {edge.callee for edge in edges}
        return callgraph

    def foldToMethod(self) -> Dict[JMethod, Set[JMethod]]:
        callgraph = {}
        for stmt, edges in self.callgraph.items():
            caller = stmt.method
            if(caller not in callgraph):
                callgraph[caller] = set()
            callgraph[caller] |= {edge.callee for edge in edges}
        return callgraph

    def dump(self, fp):
        callgraph = self.foldToStmt()
        for caller, map in callgraph.items():

            print(caller.signature + ":", file=fp)
            for stmt, callees in map.items():
                head = f"{stmt} -> "
                w = len(head)

                for callee in sorted(callees, key=str):
                    print(f"{head:<{w}}{callee.signature}", file=fp)
                    head = ""

            print("", file=fp)

    # return a dict of callgraph, formed with str
    def export(self) -> Dict[str, List[str]]:
        tmp = self.foldToMethod()
        callgraph = {}
        for caller, callees in tmp.items():
            callgraph[caller.signature] = sorted(callee.signature for callee in callees)
        return callgraph

    def to_json(self):
        return json.dumps({
                    "entries": self.entryMethods,
                    "reachable": list(self.reachableMethods),
                    "edges": self.export()},
                    default=json_utils.default,
                    indent=4)
