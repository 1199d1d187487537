"""
Build a Program from its JSON description.

    {
        "main": "<Main: void main()>",
        "classes": [
            {
                "name": "A", "super": "java.lang.Object", "interfaces": [],
                "interface": false, "abstract": false,
                "fields": [{"name": "f", "type": "B", "static": false}],
                "methods": [
                    {
                        "name": "m", "params": [["b", "B"]], "return": "B",
                        "static": false, "abstract": false,
                        "stmts": [
                            {"op": "store", "base": "this", "field": "A.f", "rhs": "b"},
                            {"op": "return", "value": "b"}
                        ]
                    }
                ]
            }
        ]
    }

Statement ops: new, copy, load, store, loadArray, storeArray, invoke, return.
A field access without "base" is a static access. Variables come into being
the first time a method mentions them.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from .Classes import JClass, JField, JMethod
from .IRStmts import CallKind, Copy, FieldRef, Invoke, IRStmt, LoadArray, LoadField, MethodRef, New, Return, StoreArray, StoreField, Var
from .Program import Program


class IRFormatError(ValueError):
    pass


def parseSignature(signature: str) -> Tuple[str, str]:
    if(not isinstance(signature, str) or not (signature.startswith("<") and signature.endswith(">"))
            or ": " not in signature):
        raise IRFormatError(f"Malformed method signature {signature!r}.")
    className, subsignature = signature[1:-1].split(": ", 1)
    return className, subsignature


def parseFieldRef(text: Any, static: bool, where: str) -> FieldRef:
    if(not isinstance(text, str) or "." not in text):
        raise IRFormatError(f"{where}: malformed field reference {text!r}, expected \"Class.field\".")
    className, name = text.rsplit(".", 1)
    return FieldRef(className, name, static)


class Loader:

    def __init__(self, document: Dict[str, Any]):
        if(not isinstance(document, dict)):
            raise IRFormatError("Program document must be a JSON object.")
        self.document = document
        self.program = None

    def load(self) -> Program:
        main = self.document.get("main")
        if(main is not None):
            parseSignature(main)
        self.program = Program(main)

        classes = self.document.get("classes", [])
        if(not isinstance(classes, list)):
            raise IRFormatError("\"classes\" must be a list.")
        bodies = []
        for i, classDoc in enumerate(classes):
            jclass = self.loadClass(classDoc, f"classes[{i}]", bodies)
            self.program.addClass(jclass)

        # bodies are loaded once every method exists, so invokes may refer forward
        for method, stmtDocs, where in bodies:
            self.loadBody(method, stmtDocs, where)
        return self.program

    def loadClass(self, classDoc: Dict[str, Any], where: str, bodies: List) -> JClass:
        name = self.string(self.require(classDoc, "name", where), "\"name\"", where)
        where = f"class {name}"
        if(self.program.getClass(name) is not None):
            raise IRFormatError(f"{where}: duplicate class.")
        superClassName = classDoc.get("super")
        if(superClassName is not None):
            self.string(superClassName, "\"super\"", where)
        jclass = JClass(name,
                        superClassName=superClassName,
                        interfaceNames=self.strings(classDoc.get("interfaces", []), "\"interfaces\"", where),
                        interface=classDoc.get("interface", False),
                        abstract=classDoc.get("abstract", False))

        for fieldDoc in classDoc.get("fields", []):
            fieldName = self.string(self.require(fieldDoc, "name", where), "field name", where)
            jclass.addField(JField(jclass, fieldName,
                                   type=self.string(fieldDoc.get("type", "java.lang.Object"), "field type", where),
                                   static=fieldDoc.get("static", False)))

        for methodDoc in classDoc.get("methods", []):
            methodName = self.string(self.require(methodDoc, "name", where), "method name", where)
            params = methodDoc.get("params", [])
            for param in params:
                if(not (isinstance(param, list) and len(param) == 2)):
                    raise IRFormatError(f"{where}.{methodName}: parameter must be a [name, type] pair, got {param!r}.")
                self.strings(param, "parameter", f"{where}.{methodName}")
            method = JMethod(jclass, methodName,
                             paramTypes=[type for _, type in params],
                             returnType=self.string(methodDoc.get("return", "void"), "\"return\"", f"{where}.{methodName}"),
                             static=methodDoc.get("static", False),
                             abstract=methodDoc.get("abstract", False))
            for paramName, _ in params:
                method.addParam(paramName)
            if(jclass.getDeclaredMethod(method.subsignature) is not None):
                raise IRFormatError(f"{where}: duplicate method {method.subsignature}.")
            jclass.addMethod(method)
            bodies.append((method, methodDoc.get("stmts", []), method.signature))
        return jclass

    def loadBody(self, method: JMethod, stmtDocs: List[Dict[str, Any]], where: str):
        if(not isinstance(stmtDocs, list)):
            raise IRFormatError(f"{where}: \"stmts\" must be a list.")
        if(stmtDocs and method.isAbstract()):
            raise IRFormatError(f"{where}: abstract method has a body.")
        for i, stmtDoc in enumerate(stmtDocs):
            method.addStmt(self.loadStmt(method, stmtDoc, f"{where}[{i}]"))

    def loadStmt(self, method: JMethod, stmtDoc: Dict[str, Any], where: str) -> IRStmt:
        if(not isinstance(stmtDoc, dict)):
            raise IRFormatError(f"{where}: statement must be a JSON object.")
        op = self.require(stmtDoc, "op", where)

        if(op == "new"):
            type = self.string(self.require(stmtDoc, "type", where), "\"type\"", where)
            return New(self.var(method, stmtDoc, "lhs", where, type), type)

        elif(op == "copy"):
            return Copy(self.var(method, stmtDoc, "lhs", where),
                        self.var(method, stmtDoc, "rhs", where))

        elif(op == "load"):
            base = self.optionalVar(method, stmtDoc, "base", where)
            fieldRef = parseFieldRef(stmtDoc.get("field"), base is None, where)
            return LoadField(self.var(method, stmtDoc, "lhs", where), base, fieldRef)

        elif(op == "store"):
            base = self.optionalVar(method, stmtDoc, "base", where)
            fieldRef = parseFieldRef(stmtDoc.get("field"), base is None, where)
            return StoreField(base, fieldRef, self.var(method, stmtDoc, "rhs", where))

        elif(op == "loadArray"):
            return LoadArray(self.var(method, stmtDoc, "lhs", where),
                             self.var(method, stmtDoc, "base", where),
                             self.var(method, stmtDoc, "index", where))

        elif(op == "storeArray"):
            return StoreArray(self.var(method, stmtDoc, "base", where),
                              self.var(method, stmtDoc, "index", where),
                              self.var(method, stmtDoc, "rhs", where))

        elif(op == "invoke"):
            kindName = stmtDoc.get("kind", "virtual")
            try:
                kind = CallKind(kindName)
            except ValueError:
                raise IRFormatError(f"{where}: unknown call kind {kindName!r}.") from None
            className, subsignature = parseSignature(self.require(stmtDoc, "method", where))
            base = self.optionalVar(method, stmtDoc, "base", where)
            if(kind == CallKind.STATIC and base is not None):
                raise IRFormatError(f"{where}: static invoke must not have a base.")
            if(kind != CallKind.STATIC and base is None):
                raise IRFormatError(f"{where}: {kind.value} invoke needs a base.")
            args = [method.getVar(arg) for arg in self.strings(stmtDoc.get("args", []), "\"args\"", where)]
            return Invoke(self.optionalVar(method, stmtDoc, "lhs", where), kind,
                          MethodRef(className, subsignature), base, args)

        elif(op == "return"):
            return Return(self.optionalVar(method, stmtDoc, "value", where))

        else:
            raise IRFormatError(f"{where}: unknown statement op {op!r}.")

    def var(self, method: JMethod, stmtDoc: Dict[str, Any], key: str, where: str, type: str = None) -> Var:
        name = self.string(self.require(stmtDoc, key, where), f"\"{key}\"", where)
        return method.getVar(name, type)

    def optionalVar(self, method: JMethod, stmtDoc: Dict[str, Any], key: str, where: str) -> Optional[Var]:
        name = stmtDoc.get(key)
        if(name is None):
            return None
        return method.getVar(self.string(name, f"\"{key}\"", where))

    @staticmethod
    def string(value: Any, what: str, where: str) -> str:
        if(not isinstance(value, str)):
            raise IRFormatError(f"{where}: {what} must be a string, got {value!r}.")
        return value

    @staticmethod
    def strings(value: Any, what: str, where: str) -> List[str]:
        if(not (isinstance(value, list) and all(isinstance(item, str) for item in value))):
            raise IRFormatError(f"{where}: {what} must be a list of strings, got {value!r}.")
        return value

    @staticmethod
    def require(doc: Dict[str, Any], key: str, where: str) -> Any:
        if(not isinstance(doc, dict) or key not in doc):
            raise IRFormatError(f"{where}: missing \"{key}\".")
        return doc[key]


def loadProgram(document: Dict[str, Any]) -> Program:
    return Loader(document).load()


def loadFile(path: str) -> Program:
    with open(path, "r", encoding="utf-8") as f:
        try:
            document = json.load(f)
        except UnicodeDecodeError as e:
            raise IRFormatError(f"{path}: not UTF-8 text ({e}).") from e
        except json.JSONDecodeError as e:
            raise IRFormatError(f"{path}: not valid JSON ({e}).") from e
    return loadProgram(document)
