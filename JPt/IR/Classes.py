from typing import Dict, List, Optional

from .IRStmts import Invoke, IRStmt, LoadArray, LoadField, Return, StoreArray, StoreField, Var


class JField:
    declaringClass: 'JClass'
    name: str
    type: str
    static: bool

    def __init__(self, declaringClass: 'JClass', name: str, type: str, static: bool = False):
        self.declaringClass = declaringClass
        self.name = name
        self.type = type
        self.static = static
        self.signature = f"<{declaringClass.name}: {type} {name}>"

    def isStatic(self) -> bool:
        return self.static

    def __eq__(self, other):
        return isinstance(other, JField) and self.signature == other.signature

    def __hash__(self):
        return hash(self.signature)

    def __str__(self):
        return self.signature

    def __repr__(self):
        return f"JField: {self.signature}"


class JMethod:
    declaringClass: 'JClass'
    name: str
    paramTypes: List[str]
    returnType: str
    subsignature: str                           # "ret name(p1,p2)", what dispatch matches on
    signature: str                              # "<Class: subsignature>", unique in a program
    static: bool
    abstract: bool

    params: List[Var]
    thisVar: Optional[Var]
    returnVars: List[Var]
    stmts: List[IRStmt]
    variables: Dict[str, Var]                   # a map from name to variable

    def __init__(self, declaringClass: 'JClass', name: str, paramTypes: List[str], returnType: str,
                        static: bool = False, abstract: bool = False):
        self.declaringClass = declaringClass
        self.name = name
        self.paramTypes = list(paramTypes)
        self.returnType = returnType
        self.subsignature = JMethod.makeSubsignature(name, paramTypes, returnType)
        self.signature = f"<{declaringClass.name}: {self.subsignature}>"
        self.static = static
        self.abstract = abstract
        self.variables = {}
        self.params = []
        self.returnVars = []
        self.stmts = []
        self.thisVar = None if static else self.getVar("this", declaringClass.name)

    @staticmethod
    def makeSubsignature(name: str, paramTypes: List[str], returnType: str) -> str:
        return f"{returnType} {name}({','.join(paramTypes)})"

    def getVar(self, name: str, type: str = None) -> Var:
        if(name not in self.variables):
            self.variables[name] = Var(name, self, type)
        var = self.variables[name]
        if(var.type is None and type is not None):
            var.type = type
        return var

    def addParam(self, name: str) -> Var:
        index = len(self.params)
        type = self.paramTypes[index] if index < len(self.paramTypes) else None
        param = self.getVar(name, type)
        self.params.append(param)
        return param

    def addStmt(self, stmt: IRStmt):
        stmt.method = self
        stmt.index = len(self.stmts)
        self.stmts.append(stmt)

        # register uses on the base variable, static accesses have no base
        if(isinstance(stmt, StoreField) and stmt.base is not None):
            stmt.base.storeFields.append(stmt)
        elif(isinstance(stmt, LoadField) and stmt.base is not None):
            stmt.base.loadFields.append(stmt)
        elif(isinstance(stmt, StoreArray)):
            stmt.base.storeArrays.append(stmt)
        elif(isinstance(stmt, LoadArray)):
            stmt.base.loadArrays.append(stmt)
        elif(isinstance(stmt, Invoke) and stmt.base is not None):
            stmt.base.invokes.append(stmt)
        elif(isinstance(stmt, Return) and stmt.value is not None):
            if(stmt.value not in self.returnVars):
                self.returnVars.append(stmt.value)

    def getParams(self) -> List[Var]:
        return self.params

    def getParam(self, i: int) -> Var:
        return self.params[i]

    def getThis(self) -> Optional[Var]:
        return self.thisVar

    def getReturnVars(self) -> List[Var]:
        return self.returnVars

    def getStmts(self) -> List[IRStmt]:
        return self.stmts

    def isStatic(self) -> bool:
        return self.static

    def isAbstract(self) -> bool:
        return self.abstract

    def __eq__(self, other):
        return isinstance(other, JMethod) and self.signature == other.signature

    def __hash__(self):
        return hash(self.signature)

    def __str__(self):
        return self.signature

    def __repr__(self):
        return f"JMethod: {self.signature}"


class JClass:
    name: str
    superClassName: Optional[str]
    interfaceNames: List[str]
    interface: bool
    abstract: bool
    fields: Dict[str, JField]
    methods: Dict[str, JMethod]                 # keyed by subsignature

    def __init__(self, name: str, superClassName: Optional[str] = None, interfaceNames: List[str] = None,
                        interface: bool = False, abstract: bool = False):
        self.name = name
        self.superClassName = superClassName
        self.interfaceNames = list(interfaceNames) if interfaceNames else []
        self.interface = interface
        # interfaces are always abstract
        self.abstract = abstract or interface
        self.fields = {}
        self.methods = {}

    def addField(self, field: JField):
        self.fields[field.name] = field

    def addMethod(self, method: JMethod):
        self.methods[method.subsignature] = method

    def getDeclaredField(self, name: str) -> Optional[JField]:
        return self.fields.get(name)

    def getDeclaredMethod(self, subsignature: str) -> Optional[JMethod]:
        return self.methods.get(subsignature)

    def getDeclaredMethods(self) -> List[JMethod]:
        return list(self.methods.values())

    def isInterface(self) -> bool:
        return self.interface

    def isAbstract(self) -> bool:
        return self.abstract

    def __eq__(self, other):
        return isinstance(other, JClass) and self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"JClass: {self.name}"
