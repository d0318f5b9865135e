import math
import unittest

from pylox.callable import LoxFunction, NativeFunction
from pylox.grammar.parser import parse
from pylox.grammar.scanner import scan
from pylox.interpreter import Interpreter, divide, is_equal, is_truthy, stringify
from pylox.lang.error import LoxRuntimeError
from pylox.resolver import resolve


def compile_source(source):
    tokens, scan_diagnostics = scan(source)
    statements, parse_diagnostics = parse(tokens)
    locals_, static_diagnostics = resolve(statements)
    diagnostics = scan_diagnostics + parse_diagnostics + static_diagnostics
    assert not diagnostics, [str(diagnostic) for diagnostic in diagnostics]
    return statements, locals_


def run(source):
    """Returns the lines printed by source."""
    output = []
    statements, locals_ = compile_source(source)
    interpreter = Interpreter(output.append)
    interpreter.resolve(locals_)
    interpreter.interpret(statements)
    return output


class ValueTestCase(unittest.TestCase):

    def test_stringify(self):
        cases = [
            (None, "nil"), (True, "true"), (False, "false"), (4.0, "4"), (4.5, "4.5"), (-0.5, "-0.5"),
            ("text", "text"), ("4.0", "4.0"),
        ]
        for value, expected in cases:
            self.assertEqual(expected, stringify(value), value)

    def test_truthiness(self):
        should_fail = [None, False]
        for case in should_fail:
            self.assertFalse(is_truthy(case), case)

        should_pass = [True, 0.0, "", "false", NativeFunction("f", 0, None)]
        for case in should_pass:
            self.assertTrue(is_truthy(case), case)

    def test_equality_never_coerces(self):
        should_fail = [(1.0, True), (0.0, False), (None, False), ("1", 1.0), (None, 0.0)]
        for left, right in should_fail:
            self.assertFalse(is_equal(left, right), (left, right))

        should_pass = [(None, None), (1.0, 1.0), ("a", "a"), (True, True)]
        for left, right in should_pass:
            self.assertTrue(is_equal(left, right), (left, right))

    def test_divide(self):
        self.assertEqual(2.5, divide(5.0, 2.0))
        self.assertEqual(math.inf, divide(1.0, 0.0))
        self.assertEqual(-math.inf, divide(-1.0, 0.0))
        self.assertEqual(-math.inf, divide(1.0, -0.0))
        self.assertTrue(math.isnan(divide(0.0, 0.0)))


class ExpressionTestCase(unittest.TestCase):

    def test_arithmetic(self):
        cases = {
            "2 + 3 * 4": "14",
            "(2 + 3) * 4": "20",
            "10 - 4 - 3": "3",
            "1 / 4": "0.25",
            "-(3 - 5)": "2",
            "0.1 + 0.2": str(0.1 + 0.2),
            "1 / 0": "inf",
            "\"a\" + \"b\"": "ab",
            "1 < 2": "true",
            "2 <= 2": "true",
            "3 > 4": "false",
            "3 >= 4": "false",
            "!nil": "true",
            "!0": "false",
            "1 == 1": "true",
            "nil == nil": "true",
            "nil == false": "false",
            "\"1\" == 1": "false",
            "1 != 2": "true",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], run(f"print {case};"), case)

    def test_operand_errors(self):
        cases = {
            "1 + \"b\"": ("+", "Operands must be two numbers or two strings."),
            "\"a\" + nil": ("+", "Operands must be two numbers or two strings."),
            "\"a\" - \"b\"": ("-", "Operands must be numbers."),
            "true * 2": ("*", "Operands must be numbers."),
            "1 < \"2\"": ("<", "Operands must be numbers."),
            "-\"a\"": ("-", "Operand must be a number."),
        }
        for case, (operator, message) in cases.items():
            with self.assertRaises(LoxRuntimeError, msg=case) as context:
                run(f"\nprint {case};")
            self.assertEqual(message, context.exception.msg, case)
            self.assertEqual(operator, context.exception.token.lexeme, case)
            self.assertEqual(2, context.exception.line, case)

    def test_short_circuit(self):
        source = """
        var calls = 0;
        fun side_effect() { calls = calls + 1; return true; }
        print false and side_effect();
        print true or side_effect();
        print calls;
        print nil or "default";
        print 1 and 2;
        print true and side_effect();
        print calls;
        """
        self.assertEqual(["false", "true", "0", "default", "2", "true", "1"], run(source))

    def test_undefined_variable(self):
        cases = ["print missing;", "missing = 1;", "{ print missing; }", "fun f() { missing = 1; } f();"]
        for case in cases:
            with self.assertRaises(LoxRuntimeError, msg=case) as context:
                run(case)
            self.assertEqual("Undefined variable 'missing'.", context.exception.msg, case)


class StatementTestCase(unittest.TestCase):

    def test_shadowing(self):
        source = 'var x = "outer"; { var x = "inner"; print x; } print x;'
        self.assertEqual(["inner", "outer"], run(source))

    def test_assignment_reaches_enclosing_scope(self):
        source = "var a = 1; { a = 2; { a = a + 1; } } print a; var b; print b;"
        self.assertEqual(["3", "nil"], run(source))

    def test_control_flow(self):
        source = """
        for (var i = 0; i < 3; i = i + 1) print i;
        var n = 3;
        while (n > 0) { n = n - 1; }
        print n;
        if (0) print "zero is truthy"; else print "unreachable";
        if (nil) print "unreachable"; else print "nil is falsy";
        """
        self.assertEqual(["0", "1", "2", "0", "zero is truthy", "nil is falsy"], run(source))

    def test_for_loop_variable_is_scoped(self):
        source = "var i = \"global\"; for (var i = 0; i < 1; i = i + 1) {} print i;"
        self.assertEqual(["global"], run(source))


class FunctionTestCase(unittest.TestCase):

    def test_call_and_return(self):
        source = """
        fun add(a, b) { return a + b; }
        fun nothing() {}
        fun early(n) { while (true) { if (n > 2) return n; n = n + 1; } }
        print add(1, 2);
        print nothing();
        print early(0);
        print add;
        print clock;
        """
        self.assertEqual(["3", "nil", "3", "<fn add>", "<native fn>"], run(source))

    def test_recursion(self):
        source = "fun fib(n) { if (n < 2) return n; return fib(n - 2) + fib(n - 1); } print fib(15);"
        self.assertEqual(["610"], run(source))

    def test_deep_recursion(self):
        source = "fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); } print count(1000);"
        self.assertEqual(["1000"], run(source))

    def test_counter_closures_are_independent(self):
        source = """
        fun make_counter() {
            var count = 0;
            fun counter() {
                count = count + 1;
                return count;
            }
            return counter;
        }
        var first = make_counter();
        var second = make_counter();
        print first();
        print first();
        print second();
        print first();
        """
        self.assertEqual(["1", "2", "1", "3"], run(source))

    def test_closures_share_their_scope(self):
        source = """
        var get; var set;
        {
            var value = "before";
            fun getter() { return value; }
            fun setter(new) { value = new; }
            get = getter; set = setter;
        }
        set("after");
        print get();
        """
        self.assertEqual(["after"], run(source))

    def test_closure_captures_definition_scope(self):
        source = """
        var a = "global";
        {
            fun show() { print a; }
            show();
            var a = "block";
            show();
        }
        fun caller() { var a = "caller"; return show_global(); }
        fun show_global() { return a; }
        print caller();
        """
        self.assertEqual(["global", "global", "global"], run(source))

    def test_call_errors(self):
        cases = {
            "fun f() {} f(1);": "Expected 0 arguments but got 1.",
            "fun f(a, b) {} f(1);": "Expected 2 arguments but got 1.",
            "clock(1);": "Expected 0 arguments but got 1.",
            "var x = 1; x();": "Can only call functions and classes.",
            "\"str\"();": "Can only call functions and classes.",
            "nil();": "Can only call functions and classes.",
        }
        for case, expected in cases.items():
            with self.assertRaises(LoxRuntimeError, msg=case) as context:
                run(case)
            self.assertEqual(expected, context.exception.msg, case)
            self.assertEqual(")", context.exception.token.lexeme, case)

    def test_functions_compare_by_identity(self):
        source = "fun f() {} fun g() {} var h = f; print f == h; print f == g; print f == 1;"
        self.assertEqual(["true", "false", "false"], run(source))

    def test_clock(self):
        source = "var start = clock(); var end = clock(); print end >= start; print start > 0;"
        self.assertEqual(["true", "true"], run(source))

    def test_function_values(self):
        statements, __ = compile_source("fun f() {}")
        interpreter = Interpreter(lambda line: None)
        interpreter.interpret(statements)

        function = interpreter.globals.values["f"]
        self.assertIsInstance(function, LoxFunction)
        self.assertIs(interpreter.globals, function.closure)
        self.assertEqual(0, function.arity())


class InterpretTestCase(unittest.TestCase):

    def test_runtime_error_aborts_rest(self):
        output = []
        statements, locals_ = compile_source('print "first"; print 1 + nil; print "never";')
        interpreter = Interpreter(output.append)
        interpreter.resolve(locals_)

        self.assertRaises(LoxRuntimeError, interpreter.interpret, statements)
        self.assertEqual(["first"], output)
        self.assertIs(interpreter.globals, interpreter.environment)

    def test_environment_restored_after_error_in_call(self):
        statements, locals_ = compile_source("fun f() { { return 1 + nil; } } f();")
        interpreter = Interpreter(lambda line: None)
        interpreter.resolve(locals_)

        self.assertRaises(LoxRuntimeError, interpreter.interpret, statements)
        self.assertIs(interpreter.globals, interpreter.environment)

    def test_idempotent(self):
        source = """
        var total = 0;
        fun add(n) { total = total + n; return total; }
        for (var i = 1; i <= 4; i = i + 1) { var tmp = add(i); }
        { var x = total; fun show() { print x; } show(); }
        """
        statements, locals_ = compile_source(source)

        outputs = []
        for __ in range(2):
            output = []
            interpreter = Interpreter(output.append)
            interpreter.resolve(locals_)
            interpreter.interpret(statements)
            outputs.append(output)

        self.assertEqual(["10"], outputs[0])
        self.assertEqual(outputs[0], outputs[1])


if __name__ == '__main__':
    unittest.main()
