from typing import Dict, List, Optional

from .Classes import JClass, JMethod
from .ClassHierarchy import ClassHierarchy


class Program:
    classes: Dict[str, JClass]
    mainMethodSignature: Optional[str]

    def __init__(self, mainMethodSignature: str = None):
        self.classes = {}
        self.mainMethodSignature = mainMethodSignature
        self.hierarchy = None

    def addClass(self, jclass: JClass):
        self.classes[jclass.name] = jclass
        # the hierarchy is derived from the class set, rebuild it on next use
        self.hierarchy = None

    def getClass(self, name: str) -> Optional[JClass]:
        return self.classes.get(name)

    def allClasses(self) -> List[JClass]:
        return list(self.classes.values())

    def allMethods(self) -> List[JMethod]:
        return [method for jclass in self.classes.values() for method in jclass.getDeclaredMethods()]

    # signature looks like "<Main: void main(java.lang.String[])>"
    def getMethod(self, signature: str) -> Optional[JMethod]:
        if(not (signature.startswith("<") and signature.endswith(">")) or ": " not in signature):
            return None
        className, subsignature = signature[1:-1].split(": ", 1)
        jclass = self.getClass(className)
        if(jclass is None):
            return None
        return jclass.getDeclaredMethod(subsignature)

    def getMainMethod(self) -> Optional[JMethod]:
        if(self.mainMethodSignature is None):
            return None
        return self.getMethod(self.mainMethodSignature)

    def getClassHierarchy(self) -> ClassHierarchy:
        if(self.hierarchy is None):
            self.hierarchy = ClassHierarchy(self)
        return self.hierarchy
