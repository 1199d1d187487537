from ..IR.Classes import JMethod
from ..IR.IRStmts import New

# An object stands for every runtime instance created at one allocation site.
# Its information should remain static as the pta proceeds.


class Obj:
    id: str
    allocSite: New
    type: str
    container: JMethod                          # method that contains the allocation site

    def __init__(self, id: str, allocSite: New, type: str, container: JMethod):
        self.id = id
        self.allocSite = allocSite
        self.type = type
        self.container = container
        self.readable_name = f"new {type}@{container.signature}[{allocSite.index}]"

    @staticmethod
    def generateID(allocSite: New):
        return f"Obj({allocSite.method.signature}[{allocSite.index}])"

    @staticmethod
    def create(allocSite: New):
        return Obj(id=Obj.generateID(allocSite),
                   allocSite=allocSite,
                   type=allocSite.type,
                   container=allocSite.method)

    def getType(self) -> str:
        return self.type

    def __str__(self):
        return self.readable_name

    def __eq__(self, other):
        return isinstance(other, Obj) and self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return self.id
