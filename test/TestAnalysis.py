import unittest

from JPt.PTA.Analysis import Analysis
from JPt.PTA.Pointers import InstanceFieldPtr, VarPtr
from JPt.PTA.PointToSet import PointsToSet

from Programs import (MAIN, cls, copy, invoke, load, loadArray, mainClass, method, new, overrideProgram,
                      program, ret, store, storeArray)


class TestBase(unittest.TestCase):

    def solve(self, prog):
        self.program = prog
        self.analysis = Analysis(prog)
        self.result = self.analysis.solve()
        return self.result

    def var(self, name, signature=MAIN):
        return self.program.getMethod(signature).variables[name]

    def pts(self, name, signature=MAIN):
        return set(self.result.getPointsToSet(self.var(name, signature)))

    # the abstract object allocated by the index-th statement of a method
    def objAt(self, index, signature=MAIN):
        stmt = self.program.getMethod(signature).getStmts()[index]
        return self.analysis.heapModel.getObj(stmt)

    def callees(self, signature=MAIN):
        return self.result.getCallGraph().export().get(signature, [])


class TestScenarios(TestBase):

    def testFieldThroughAlias(self):
        # a = new A; b = a; b.f = new B; c = a.f
        self.solve(program(
            mainClass([
                new("a", "A"),
                copy("b", "a"),
                new("t", "B"),
                store("b", "A.f", "t"),
                load("c", "a", "A.f"),
            ]),
            cls("A", fields=[("f", False)]),
            cls("B"),
        ))
        self.assertEqual(self.pts("c"), {self.objAt(2)})
        self.assertEqual(self.pts("b"), {self.objAt(0)})

        self.assertEqual({var.name for var in self.result.getVars()}, {"a", "b", "t", "c"})
        self.assertEqual(set(self.result.getPointsToSetOf(VarPtr(self.var("a")))), {self.objAt(0)})
        field = self.program.getClass("A").getDeclaredField("f")
        fieldPtr = self.analysis.pointerFlow.getInstanceFieldPtr(self.objAt(0), field)
        self.assertEqual(set(self.result.getPointsToSetOf(fieldPtr)), {self.objAt(2)})
        # a field of an object nobody accessed
        self.assertTrue(self.result.getPointsToSetOf(InstanceFieldPtr(self.objAt(2), field)).isEmpty())

    def testStaticCallFromTwoSites(self):
        ident = "<Main: java.lang.Object id(java.lang.Object)>"
        self.solve(program(
            mainClass([
                new("x", "A"),
                new("y", "B"),
                invoke("static", ident, args=["x"], lhs="r1"),
                invoke("static", ident, args=["y"], lhs="r2"),
            ], methods=[
                method("id", [ret("p")], params=[("p", "java.lang.Object")], ret="java.lang.Object", static=True),
            ]),
            cls("A"),
            cls("B"),
        ))
        both = {self.objAt(0), self.objAt(1)}
        self.assertEqual(self.pts("p", ident), both)
        # context-insensitive: both results see both arguments
        self.assertEqual(self.pts("r1"), both)
        self.assertEqual(self.pts("r2"), both)

        reachable = [m.signature for m in self.result.getCallGraph().getReachableMethods()]
        self.assertEqual(reachable.count(ident), 1)
        self.assertEqual(self.result.getCallGraph().edgeCount(), 2)
        self.assertEqual(self.callees(), [ident])


class TestDispatch(TestBase):

    def testRuntimeTypeSelectsOverride(self):
        self.solve(overrideProgram())
        self.assertEqual(self.callees(), ["<B: void m()>"])
        self.assertTrue(self.result.isReachable(self.program.getMethod("<B: void m()>")))
        self.assertFalse(self.result.isReachable(self.program.getMethod("<A: void m()>")))
        self.assertEqual(self.pts("this", "<B: void m()>"), {self.objAt(0)})

    def testInheritedMethod(self):
        self.solve(program(
            mainClass([
                new("b", "B"),
                invoke("virtual", "<B: void m()>", base="b"),
            ]),
            cls("A", methods=[method("m", [])]),
            cls("B", super="A"),
        ))
        self.assertEqual(self.callees(), ["<A: void m()>"])

    def testInterfaceCall(self):
        self.solve(program(
            mainClass([
                new("i", "C"),
                invoke("interface", "<I: void m()>", base="i"),
            ]),
            cls("I", super=None, interface=True, methods=[method("m", [], abstract=True)]),
            cls("C", interfaces=["I"], methods=[method("m", [])]),
            cls("D", interfaces=["I"], methods=[method("m", [])]),
        ))
        self.assertEqual(self.callees(), ["<C: void m()>"])

    def testAbstractDeclarationIsSkipped(self):
        self.solve(program(
            mainClass([
                new("a", "B"),
                invoke("virtual", "<A: void m()>", base="a"),
            ]),
            cls("Base", methods=[method("m", [])]),
            cls("A", super="Base", abstract=True, methods=[method("m", [], abstract=True)]),
            cls("B", super="A"),
        ))
        self.assertEqual(self.callees(), ["<Base: void m()>"])

    def testSpecialCallIgnoresRuntimeType(self):
        self.solve(program(
            mainClass([
                new("a", "B"),
                invoke("special", "<A: void <init>()>", base="a"),
            ]),
            cls("A", methods=[method("<init>", [])]),
            cls("B", super="A", methods=[method("<init>", [])]),
        ))
        self.assertEqual(self.callees(), ["<A: void <init>()>"])
        self.assertEqual(self.pts("this", "<A: void <init>()>"), {self.objAt(0)})

    def testEachReceiverDispatchedSeparately(self):
        self.solve(program(
            mainClass([
                new("a", "A"),
                new("b", "B"),
                copy("x", "a"),
                copy("x", "b"),
                invoke("virtual", "<A: void m()>", base="x"),
            ]),
            cls("A", methods=[method("m", [])]),
            cls("B", super="A", methods=[method("m", [])]),
        ))
        self.assertEqual(self.callees(), ["<A: void m()>", "<B: void m()>"])
        self.assertEqual(self.pts("this", "<A: void m()>"), {self.objAt(0)})
        self.assertEqual(self.pts("this", "<B: void m()>"), {self.objAt(1)})

    def testArgumentsAndReturnOfVirtualCall(self):
        getter = "<Box: java.lang.Object swap(java.lang.Object)>"
        self.solve(program(
            mainClass([
                new("box", "Box"),
                new("v", "V"),
                invoke("virtual", getter, base="box", args=["v"], lhs="old"),
            ]),
            cls("Box", fields=[("f", False)], methods=[
                method("swap", [
                    load("o", "this", "Box.f"),
                    store("this", "Box.f", "n"),
                    ret("o"),
                ], params=[("n", "java.lang.Object")], ret="java.lang.Object"),
            ]),
            cls("V"),
        ))
        self.assertEqual(self.pts("n", getter), {self.objAt(1)})
        # the store happens before the load is observed, fields are flow-insensitive
        self.assertEqual(self.pts("old"), {self.objAt(1)})


class TestHeap(TestBase):

    def testFieldSensitivity(self):
        self.solve(program(
            mainClass([
                new("o1", "A"),
                new("o2", "A"),
                new("v1", "B"),
                new("v2", "C"),
                store("o1", "A.f", "v1"),
                store("o2", "A.f", "v2"),
                load("r1", "o1", "A.f"),
                load("r2", "o2", "A.f"),
            ]),
            cls("A", fields=[("f", False)]),
            cls("B"),
            cls("C"),
        ))
        self.assertEqual(self.pts("r1"), {self.objAt(2)})
        self.assertEqual(self.pts("r2"), {self.objAt(3)})

        field = self.program.getClass("A").getDeclaredField("f")
        flow = self.result.getPointerFlowGraph()
        f1 = flow.getInstanceFieldPtr(self.objAt(0), field)
        f2 = flow.getInstanceFieldPtr(self.objAt(1), field)
        self.assertIsNot(f1, f2)
        self.assertIs(f1, flow.getInstanceFieldPtr(self.objAt(0), field))
        self.assertEqual(set(f1.getPointsToSet()), {self.objAt(2)})
        self.assertEqual(set(f2.getPointsToSet()), {self.objAt(3)})

    def testInheritedField(self):
        self.solve(program(
            mainClass([
                new("b", "B"),
                new("v", "V"),
                store("b", "B.f", "v"),
                load("r", "b", "A.f"),
            ]),
            cls("A", fields=[("f", False)]),
            cls("B", super="A"),
            cls("V"),
        ))
        self.assertEqual(self.pts("r"), {self.objAt(1)})

    def testStaticField(self):
        self.solve(program(
            mainClass([
                new("x", "A"),
                store(None, "Main.g", "x"),
                load("y", None, "Main.g"),
            ], fields=[("g", True)]),
            cls("A"),
        ))
        self.assertEqual(self.pts("y"), {self.objAt(0)})

    def testArrayElementsCollapseOntoBase(self):
        self.solve(program(
            mainClass([
                new("arr", "A[]"),
                new("x", "B"),
                storeArray("arr", "x"),
                loadArray("y", "arr"),
            ]),
            cls("B"),
        ))
        self.assertIn(self.objAt(1), self.pts("y"))
        self.assertEqual(self.pts("y"), {self.objAt(0), self.objAt(1)})
        self.assertEqual(self.pts("arr"), {self.objAt(0), self.objAt(1)})

    def testAllocationSiteIsTheIdentity(self):
        self.solve(program(
            mainClass([
                new("a", "A"),
                new("b", "A"),
            ]),
            cls("A"),
        ))
        self.assertNotEqual(self.objAt(0), self.objAt(1))
        self.assertEqual(len(self.result.getObjects()), 2)


class TestRobustness(TestBase):

    def testUnresolvableVirtualCall(self):
        self.solve(program(
            mainClass([
                new("a", "A"),
                invoke("virtual", "<A: void missing()>", base="a"),
            ]),
            cls("A"),
        ))
        self.assertEqual(self.result.getCallGraph().edgeCount(), 0)
        self.assertEqual(self.result.getCallGraph().getReachableMethods(), [self.program.getMethod(MAIN)])

    def testDynamicCallIsNotResolved(self):
        self.solve(program(
            mainClass([
                new("a", "A"),
                invoke("dynamic", "<A: A m()>", base="a", lhs="r"),
                invoke("other", "<A: A m()>", base="a", lhs="s"),
            ]),
            cls("A", methods=[method("m", [new("x", "A"), ret("x")], ret="A")]),
        ))
        self.assertEqual(self.result.getCallGraph().edgeCount(), 0)
        self.assertFalse(self.result.isReachable(self.program.getMethod("<A: A m()>")))
        self.assertEqual(self.pts("r"), set())
        self.assertEqual(self.pts("a"), {self.objAt(0)})

    def testUnresolvableStaticCallAndField(self):
        self.solve(program(
            mainClass([
                new("a", "A"),
                invoke("static", "<Nowhere: void f()>", args=["a"]),
                store("a", "A.nope", "a"),
                load("b", "a", "A.nope"),
                copy("c", "a"),
            ]),
            cls("A"),
        ))
        self.assertEqual(self.result.getCallGraph().edgeCount(), 0)
        self.assertEqual(self.pts("b"), set())
        self.assertEqual(self.pts("c"), {self.objAt(0)})

    def testArityMismatchBindsExistingPairs(self):
        target = "<Main: void take(java.lang.Object)>"
        self.solve(program(
            mainClass([
                new("a", "A"),
                new("b", "A"),
            ] + [invoke("static", target, args=["a", "b"])],
            methods=[method("take", [], params=[("p", "java.lang.Object")], static=True)]),
            cls("A"),
        ))
        self.assertEqual(self.pts("p", target), {self.objAt(0)})

    def testRecursiveCall(self):
        rec = "<Main: java.lang.Object rec(java.lang.Object)>"
        self.solve(program(
            mainClass([
                new("a", "A"),
                invoke("static", rec, args=["a"], lhs="r"),
            ], methods=[
                method("rec", [
                    invoke("static", rec, args=["p"], lhs="q"),
                    ret("q"),
                    ret("p"),
                ], params=[("p", "java.lang.Object")], ret="java.lang.Object", static=True),
            ]),
            cls("A"),
        ))
        self.assertEqual(self.pts("r"), {self.objAt(0)})
        self.assertEqual(self.callees(rec), [rec])

    def testNoEntryMethod(self):
        prog = program(cls("A"))
        prog.mainMethodSignature = None
        result = Analysis(prog).solve()
        self.assertEqual(result.getCallGraph().getReachableMethods(), [])
        self.assertEqual(list(result.getPointers()), [])


class TestFixedPoint(TestBase):

    def testLateEdgeCarriesExistingFacts(self):
        # b already points to its object when the a.f store edge appears
        self.solve(program(
            mainClass([
                new("b", "B"),
                new("a", "A"),
                store("a", "A.f", "b"),
                load("c", "a", "A.f"),
            ]),
            cls("A", fields=[("f", False)]),
            cls("B"),
        ))
        self.assertEqual(self.pts("c"), {self.objAt(0)})

    def testAddEdgeAfterSourceHasFacts(self):
        prog = program(mainClass([new("x", "A")]), cls("A"))
        analysis = Analysis(prog)
        analysis.solve()
        flow = analysis.pointerFlow
        main = prog.getMethod(MAIN)
        x = flow.getVarPtr(main.variables["x"])
        y = flow.getVarPtr(main.getVar("y"))

        analysis.addPFGEdge(x, y)
        analysis.addPFGEdge(x, y)
        self.assertEqual(len(analysis.workList), 1)
        analysis.analyze()
        self.assertEqual(set(y.getPointsToSet()), set(x.getPointsToSet()))
        self.assertEqual(flow.getSuccsOf(x), {y})

    def testRerunIsNoOp(self):
        self.solve(overrideProgram())
        before = self.snapshot()
        self.analysis.analyze()
        self.analysis.addReachable(self.program.getMethod(MAIN))
        self.assertTrue(self.analysis.workList.isEmpty())
        self.assertEqual(self.snapshot(), before)

    def snapshot(self):
        flow = self.analysis.pointerFlow
        return ({ptr.id: frozenset(ptr.getPointsToSet()) for ptr in flow.getPointers()},
                flow.edgeCount(),
                self.analysis.callgraph.edgeCount(),
                len(self.analysis.callgraph.reachableMethods))

    def testMonotonicity(self):
        snapshots = []

        class RecordingAnalysis(Analysis):
            def propagate(self, pointer, pointsToSet):
                delta = super().propagate(pointer, pointsToSet)
                snapshots.append(({ptr.id: frozenset(ptr.getPointsToSet()) for ptr in self.pointerFlow.getPointers()},
                                  self.pointerFlow.edgeCount(),
                                  self.callgraph.edgeCount()))
                return delta

        prog = program(
            mainClass([
                new("a", "A"),
                new("b", "B"),
                copy("x", "a"),
                copy("x", "b"),
                store("x", "A.f", "a"),
                load("y", "x", "A.f"),
                invoke("virtual", "<A: void m()>", base="y"),
            ]),
            cls("A", fields=[("f", False)], methods=[method("m", [copy("z", "this")])]),
            cls("B", super="A", methods=[method("m", [copy("z", "this")])]),
        )
        RecordingAnalysis(prog).solve()

        self.assertGreater(len(snapshots), 1)
        for (early, earlyEdges, earlyCalls), (late, lateEdges, lateCalls) in zip(snapshots, snapshots[1:]):
            for id, objs in early.items():
                self.assertLessEqual(objs, late[id])
            self.assertLessEqual(earlyEdges, lateEdges)
            self.assertLessEqual(earlyCalls, lateCalls)

    def testEmptyDeltaIsDiscarded(self):
        prog = program(mainClass([new("x", "A"), copy("y", "x")]), cls("A"))
        analysis = Analysis(prog)
        analysis.solve()
        x = analysis.pointerFlow.getVarPtr(prog.getMethod(MAIN).variables["x"])
        delta = analysis.propagate(x, PointsToSet(x.getPointsToSet()))
        self.assertTrue(delta.isEmpty())
        self.assertTrue(analysis.workList.isEmpty())
        self.assertIsInstance(x, VarPtr)


if __name__ == "__main__":
    unittest.main()
