from enum import Enum
from typing import List, Optional
import typing

if typing.TYPE_CHECKING:
    from .Classes import JMethod


class CallKind(Enum):
    STATIC = "static"
    SPECIAL = "special"
    VIRTUAL = "virtual"
    INTERFACE = "interface"
    DYNAMIC = "dynamic"
    OTHER = "other"


class Var:
    name: str
    type: str
    method: 'JMethod'                           # method in which this variable is declared
    id: str

    # statements that use this variable as a base, filled in by JMethod.addStmt
    storeFields: List['StoreField']
    loadFields: List['LoadField']
    storeArrays: List['StoreArray']
    loadArrays: List['LoadArray']
    invokes: List['Invoke']

    def __init__(self, name: str, method: 'JMethod', type: str = None):
        self.name = name
        self.method = method
        self.type = type
        self.id = f"{method.signature}/{name}"
        self.storeFields = []
        self.loadFields = []
        self.storeArrays = []
        self.loadArrays = []
        self.invokes = []

    def getStoreFields(self) -> List['StoreField']:
        return self.storeFields

    def getLoadFields(self) -> List['LoadField']:
        return self.loadFields

    def getStoreArrays(self) -> List['StoreArray']:
        return self.storeArrays

    def getLoadArrays(self) -> List['LoadArray']:
        return self.loadArrays

    def getInvokes(self) -> List['Invoke']:
        return self.invokes

    def __eq__(self, other):
        return isinstance(other, Var) and self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __str__(self):
        return self.id

    def __repr__(self):
        return f"Var: {self.id}"


# reference to a field as written at the access site, resolved through the class hierarchy
class FieldRef:
    declaringClass: str
    name: str
    static: bool

    def __init__(self, declaringClass: str, name: str, static: bool):
        self.declaringClass = declaringClass
        self.name = name
        self.static = static

    def __str__(self):
        return f"<{self.declaringClass}: {self.name}>"


class MethodRef:
    declaringClass: str
    subsignature: str

    def __init__(self, declaringClass: str, subsignature: str):
        self.declaringClass = declaringClass
        self.subsignature = subsignature

    def __str__(self):
        return f"<{self.declaringClass}: {self.subsignature}>"


class IRStmt:
    method: 'JMethod'                   # method to which this statement belongs
    index: int                          # position in the method body

    def __repr__(self):
        return f"IRStmt: {str(self)}"


# x = new T
class New(IRStmt):
    lvalue: Var
    type: str

    def __init__(self, lvalue: Var, type: str):
        self.lvalue = lvalue
        self.type = type

    def __str__(self):
        return f"{self.lvalue.name} = new {self.type}"


# x = y
class Copy(IRStmt):
    lvalue: Var
    rvalue: Var

    def __init__(self, lvalue: Var, rvalue: Var):
        self.lvalue = lvalue
        self.rvalue = rvalue

    def __str__(self):
        return f"{self.lvalue.name} = {self.rvalue.name}"


# x = base.f, or x = C.f when the field is static and base is None
class LoadField(IRStmt):
    lvalue: Var
    base: Optional[Var]
    fieldRef: FieldRef

    def __init__(self, lvalue: Var, base: Optional[Var], fieldRef: FieldRef):
        self.lvalue = lvalue
        self.base = base
        self.fieldRef = fieldRef

    def isStatic(self) -> bool:
        return self.fieldRef.static

    def __str__(self):
        owner = self.base.name if self.base else self.fieldRef.declaringClass
        return f"{self.lvalue.name} = {owner}.{self.fieldRef.name}"


# base.f = y, or C.f = y
class StoreField(IRStmt):
    base: Optional[Var]
    fieldRef: FieldRef
    rvalue: Var

    def __init__(self, base: Optional[Var], fieldRef: FieldRef, rvalue: Var):
        self.base = base
        self.fieldRef = fieldRef
        self.rvalue = rvalue

    def isStatic(self) -> bool:
        return self.fieldRef.static

    def __str__(self):
        owner = self.base.name if self.base else self.fieldRef.declaringClass
        return f"{owner}.{self.fieldRef.name} = {self.rvalue.name}"


# x = base[index]
class LoadArray(IRStmt):
    lvalue: Var
    base: Var
    arrayIndex: Var

    def __init__(self, lvalue: Var, base: Var, arrayIndex: Var):
        self.lvalue = lvalue
        self.base = base
        self.arrayIndex = arrayIndex

    def __str__(self):
        return f"{self.lvalue.name} = {self.base.name}[{self.arrayIndex.name}]"


# base[index] = y
class StoreArray(IRStmt):
    base: Var
    arrayIndex: Var
    rvalue: Var

    def __init__(self, base: Var, arrayIndex: Var, rvalue: Var):
        self.base = base
        self.arrayIndex = arrayIndex
        self.rvalue = rvalue

    def __str__(self):
        return f"{self.base.name}[{self.arrayIndex.name}] = {self.rvalue.name}"


# [lvalue =] base.m(args), or [lvalue =] C.m(args) for static calls
class Invoke(IRStmt):
    lvalue: Optional[Var]
    kind: CallKind
    methodRef: MethodRef
    base: Optional[Var]
    args: List[Var]

    def __init__(self, lvalue: Optional[Var], kind: CallKind, methodRef: MethodRef,
                        base: Optional[Var], args: List[Var]):
        self.lvalue = lvalue
        self.kind = kind
        self.methodRef = methodRef
        self.base = base
        self.args = args

    def isStatic(self) -> bool:
        return self.kind == CallKind.STATIC

    def getLValue(self) -> Optional[Var]:
        return self.lvalue

    def __str__(self):
        head = f"{self.lvalue.name} = " if self.lvalue else ""
        owner = self.base.name if self.base else self.methodRef.declaringClass
        args = ", ".join(arg.name for arg in self.args)
        return f"{head}invoke{self.kind.value} {owner}.{self.methodRef}({args})"


class Return(IRStmt):
    value: Optional[Var]

    def __init__(self, value: Optional[Var]):
        self.value = value

    def __str__(self):
        return f"return {self.value.name}" if self.value else "return"
