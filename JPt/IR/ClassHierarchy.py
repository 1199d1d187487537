from collections import defaultdict
import json
from typing import Dict, List, Optional
import typing

from .Classes import JClass, JField, JMethod
from .IRStmts import CallKind, FieldRef, Invoke

if typing.TYPE_CHECKING:
    from .Program import Program

# runtime type of arrays, their methods are looked up here
OBJECT_CLASS = "java.lang.Object"


class ClassHierarchy:
    program: 'Program'
    subclasses: Dict[str, List[JClass]]
    implementors: Dict[str, List[JClass]]
    subinterfaces: Dict[str, List[JClass]]

    def __init__(self, program: 'Program'):
        self.program = program
        self.subclasses = defaultdict(list)
        self.implementors = defaultdict(list)
        self.subinterfaces = defaultdict(list)

        for jclass in program.allClasses():
            if(jclass.isInterface()):
                # an interface's super interfaces are listed as its interfaces
                for name in jclass.interfaceNames:
                    self.subinterfaces[name].append(jclass)
            else:
                if(jclass.superClassName is not None):
                    self.subclasses[jclass.superClassName].append(jclass)
                for name in jclass.interfaceNames:
                    self.implementors[name].append(jclass)

    def getClass(self, name: str) -> Optional[JClass]:
        return self.program.getClass(name)

    def getSuperClass(self, jclass: JClass) -> Optional[JClass]:
        if(jclass.superClassName is None):
            return None
        return self.getClass(jclass.superClassName)

    def getDirectSubclassesOf(self, jclass: JClass) -> List[JClass]:
        return self.subclasses[jclass.name]

    def getDirectImplementorsOf(self, jclass: JClass) -> List[JClass]:
        return self.implementors[jclass.name]

    def getDirectSubinterfacesOf(self, jclass: JClass) -> List[JClass]:
        return self.subinterfaces[jclass.name]

    def superClassChain(self, jclass: JClass):
        # a malformed program may declare a cycle, stop when a class repeats
        visited = set()
        while(jclass is not None and jclass.name not in visited):
            visited.add(jclass.name)
            yield jclass
            jclass = self.getSuperClass(jclass)

    def resolveField(self, fieldRef: FieldRef) -> Optional[JField]:
        jclass = self.getClass(fieldRef.declaringClass)
        for cls in self.superClassChain(jclass):
            field = cls.getDeclaredField(fieldRef.name)
            if(field is not None):
                return field
            # static constants may come from an implemented interface
            if(fieldRef.static):
                for name in cls.interfaceNames:
                    interface = self.getClass(name)
                    field = interface.getDeclaredField(fieldRef.name) if interface else None
                    if(field is not None):
                        return field
        return None

    def dispatch(self, jclass: JClass, subsignature: str) -> Optional[JMethod]:
        """
        Look up the method with the given subsignature starting at jclass
        and walking up the superclass chain. Abstract declarations are
        skipped. Return None if nothing matches.
        """
        for cls in self.superClassChain(jclass):
            method = cls.getDeclaredMethod(subsignature)
            if(method is not None and not method.isAbstract()):
                return method
        return None

    def resolveCallee(self, type: Optional[str], callSite: Invoke) -> Optional[JMethod]:
        """
        Resolve the callee of callSite. type is the runtime type of the
        receiver object and is ignored for static and special calls.
        Dynamic and other call sites have no target in the hierarchy and
        resolve to None.
        """
        methodRef = callSite.methodRef
        subsignature = methodRef.subsignature
        if(callSite.kind == CallKind.STATIC or callSite.kind == CallKind.SPECIAL):
            declaringClass = self.getClass(methodRef.declaringClass)
            return self.dispatch(declaringClass, subsignature)

        if(callSite.kind != CallKind.VIRTUAL and callSite.kind != CallKind.INTERFACE):
            return None
        if(type is None):
            return None
        runtimeClass = self.getClass(type)
        if(runtimeClass is None and type.endswith("[]")):
            runtimeClass = self.getClass(OBJECT_CLASS)
        return self.dispatch(runtimeClass, subsignature)

    def to_json(self):
        res = defaultdict(dict)
        for name, classes in self.subclasses.items():
            res[name]["subclasses"] = [jclass.name for jclass in classes]
        for name, classes in self.implementors.items():
            res[name]["implementors"] = [jclass.name for jclass in classes]
        for name, classes in self.subinterfaces.items():
            res[name]["subinterfaces"] = [jclass.name for jclass in classes]
        return json.dumps(res, indent=4)
