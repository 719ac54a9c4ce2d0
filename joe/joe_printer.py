"""
Renders Joe AST nodes back into canonical source text.
"""

from joe.joe_ast import (
    Program, LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, StringLiteral, Boolean, PrefixExpression,
    InfixExpression, IfExpression, FunctionLiteral, CallExpression,
    ArrayLiteral, IndexExpression, HashLiteral,
)


class Printer:
    """Formats AST nodes into their canonical, fully-parenthesized source form."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, node) -> str:
        """Public entry point to format a node. A missing node renders as ''."""
        handler = self._get_handler(node)
        return handler(node)

    def _get_handler(self, node):
        """Dispatcher to find the correct formatting method."""
        if node is None:
            return self._pformat_missing
        handler = self._handlers.get(type(node))
        if handler is not None:
            return handler
        # Subclasses of known nodes fall back to their base formatter.
        for node_type, fallback in self._handlers.items():
            if isinstance(node, node_type):
                return fallback
        return lambda n: repr(n)

    def _create_handlers(self):
        return {
            Program: self._pformat_statements,
            BlockStatement: self._pformat_statements,
            LetStatement: self._pformat_let,
            ReturnStatement: self._pformat_return,
            ExpressionStatement: self._pformat_expression_statement,
            Identifier: self._pformat_token,
            IntegerLiteral: self._pformat_token,
            StringLiteral: self._pformat_token,
            Boolean: self._pformat_token,
            PrefixExpression: self._pformat_prefix,
            InfixExpression: self._pformat_infix,
            IfExpression: self._pformat_if,
            FunctionLiteral: self._pformat_function,
            CallExpression: self._pformat_call,
            ArrayLiteral: self._pformat_array,
            IndexExpression: self._pformat_index,
            HashLiteral: self._pformat_hash,
        }

    def _pformat_missing(self, node):
        return ""

    def _pformat_list(self, nodes):
        return ", ".join(self.pformat(n) for n in nodes)

    # --- Statements ---

    def _pformat_statements(self, node):
        return "".join(self.pformat(s) for s in node.statements)

    def _pformat_let(self, node):
        return f"{node.token_literal()} {self.pformat(node.name)} = {self.pformat(node.value)};"

    def _pformat_return(self, node):
        return f"{node.token_literal()} {self.pformat(node.value)};"

    def _pformat_expression_statement(self, node):
        return self.pformat(node.expression)

    # --- Expressions ---

    def _pformat_token(self, node):
        # Literals and identifiers print exactly as they were written.
        return node.token_literal()

    def _pformat_prefix(self, node):
        return f"({node.operator}{self.pformat(node.right)})"

    def _pformat_infix(self, node):
        return f"({self.pformat(node.left)} {node.operator} {self.pformat(node.right)})"

    def _pformat_if(self, node):
        out = f"if{self.pformat(node.condition)} {self.pformat(node.consequence)}"
        if node.alternative is not None:
            out += f"else {self.pformat(node.alternative)}"
        return out

    def _pformat_function(self, node):
        return f"{node.token_literal()}({self._pformat_list(node.parameters)}){self.pformat(node.body)}"

    def _pformat_call(self, node):
        return f"{self.pformat(node.function)}({self._pformat_list(node.arguments)})"

    def _pformat_array(self, node):
        return f"[{self._pformat_list(node.elements)}]"

    def _pformat_index(self, node):
        return f"({self.pformat(node.left)}[{self.pformat(node.index)}])"

    def _pformat_hash(self, node):
        pairs = ", ".join(f"{self.pformat(k)}:{self.pformat(v)}" for k, v in node.pairs)
        return "{" + pairs + "}"
