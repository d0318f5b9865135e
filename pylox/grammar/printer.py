"""Renders syntax trees as Lisp-style parenthesized text, e.g. `1 + 2 * 3` becomes `(+ 1.0 (* 2.0 3.0))`. Makes
precedence and desugaring visible, which is all it is for.
"""

from pylox.grammar import nodes


class AstPrinter:

    def print(self, node):
        """Returns the parenthesized form of an expression or statement node."""
        if isinstance(node, nodes.Literal):
            if node.value is None:
                return "nil"
            if isinstance(node.value, bool):
                return "true" if node.value else "false"
            return str(node.value)
        elif isinstance(node, nodes.Grouping):
            return self.parenthesize("group", node.expression)
        elif isinstance(node, nodes.Unary):
            return self.parenthesize(node.operator.lexeme, node.right)
        elif isinstance(node, (nodes.Binary, nodes.Logical)):
            return self.parenthesize(node.operator.lexeme, node.left, node.right)
        elif isinstance(node, nodes.Variable):
            return node.name.lexeme
        elif isinstance(node, nodes.Assign):
            return self.parenthesize(f"= {node.name.lexeme}", node.value)
        elif isinstance(node, nodes.Call):
            return self.parenthesize("call", node.callee, *node.arguments)

        elif isinstance(node, nodes.Expression):
            return self.parenthesize(";", node.expression)
        elif isinstance(node, nodes.Print):
            return self.parenthesize("print", node.expression)
        elif isinstance(node, nodes.Var):
            if node.initializer is None:
                return f"(var {node.name.lexeme})"
            return self.parenthesize(f"var {node.name.lexeme}", node.initializer)
        elif isinstance(node, nodes.Block):
            return self.parenthesize("block", *node.statements)
        elif isinstance(node, nodes.If):
            branches = [node.then_branch] + ([node.else_branch] if node.else_branch is not None else [])
            return self.parenthesize("if", node.condition, *branches)
        elif isinstance(node, nodes.While):
            return self.parenthesize("while", node.condition, node.body)
        elif isinstance(node, nodes.Function):
            params = " ".join(param.lexeme for param in node.params)
            return self.parenthesize(f"fun {node.name.lexeme} ({params})", *node.body)
        elif isinstance(node, nodes.Return):
            if node.value is None:
                return "(return)"
            return self.parenthesize("return", node.value)

        raise TypeError(f"cannot print {type(node).__name__}")

    def parenthesize(self, name, *children):
        return "(" + " ".join([name] + [self.print(child) for child in children]) + ")"
