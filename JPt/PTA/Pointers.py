from ..IR.Classes import JField
from ..IR.IRStmts import Var
from .Objects import Obj
from .PointToSet import PointsToSet


# Pointers are compared by id, so the graph can be keyed by them.
# Each pointer owns its points-to set for the whole solve.
class Pointer:
    id: str
    pointsToSet: PointsToSet

    def getPointsToSet(self) -> PointsToSet:
        return self.pointsToSet

    def __repr__(self) -> str:
        return f"{type(self).__name__}: {self.id}"

    def __eq__(self, other):
        return isinstance(other, Pointer) and self.id == other.id

    def __str__(self):
        return self.id

    def __hash__(self):
        return hash(self.id)


class VarPtr(Pointer):
    var: Var

    def __init__(self, var: Var):
        self.var = var
        self.id = VarPtr.generateID(var)
        self.pointsToSet = PointsToSet()

    @staticmethod
    def generateID(var: Var):
        return var.id

    def getVar(self) -> Var:
        return self.var


class StaticFieldPtr(Pointer):
    field: JField

    def __init__(self, field: JField):
        self.field = field
        self.id = StaticFieldPtr.generateID(field)
        self.pointsToSet = PointsToSet()

    @staticmethod
    def generateID(field: JField):
        return field.signature


class InstanceFieldPtr(Pointer):
    obj: Obj
    field: JField

    def __init__(self, obj: Obj, field: JField):
        self.obj = obj
        self.field = field
        self.id = InstanceFieldPtr.generateID(obj, field)
        self.pointsToSet = PointsToSet()

    @staticmethod
    def generateID(obj: Obj, field: JField):
        return f"<{obj.id}>.{field.name}@{field.declaringClass.name}"

    def __str__(self):
        return f"<{self.obj}>.{self.field.name}"
