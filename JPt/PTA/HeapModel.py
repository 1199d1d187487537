from typing import Dict

from ..IR.IRStmts import New
from ..IR.Program import Program
from .Objects import Obj


class AllocationSiteHeapModel:
    program: Program
    pool: Dict[str, Obj]

    def __init__(self, program: Program):
        self.program = program
        self.pool = {}

    def getObj(self, allocSite: New) -> Obj:
        id = Obj.generateID(allocSite)
        if(id in self.pool):
            return self.pool[id]
        else:
            obj = Obj.create(allocSite)
            self.pool[id] = obj
            return obj

    def getObjects(self):
        return self.pool.values()
