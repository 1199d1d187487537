from ..IR.Classes import JMethod
from .Objects import Obj
from .Pointers import Pointer
from .PointToSet import PointsToSet


def default(o):
    if(isinstance(o, (set, PointsToSet))):
        return sorted(str(e) for e in o)
    elif(isinstance(o, (Obj, Pointer, JMethod))):
        return str(o)
    else:
        raise TypeError(f"Type {type(o).__name__} not supported.")
