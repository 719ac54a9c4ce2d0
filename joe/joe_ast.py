"""
Defines the abstract syntax tree produced by the Joe parser.

Every node keeps the token that introduced it (for diagnostics via
`token_literal()`) and renders itself back to canonical source through
`str()`. The canonical form fully parenthesizes prefix, infix and index
expressions, which is what the precedence tests compare against.
"""

from abc import ABC
from typing import List, Optional, Tuple

from joe.joe_tokens import Token

# =================================================================
# Abstract Base Classes
# =================================================================

class Node(ABC):
    """Base class for every AST node."""
    token: Optional[Token] = None

    def token_literal(self) -> str:
        return self.token.literal if self.token is not None else ""

    def to_str_repr(self) -> str:
        from joe.joe_printer import Printer
        return Printer().pformat(self)

    def __str__(self) -> str:
        return self.to_str_repr()


class Statement(Node):
    """A node that appears at statement position (program or block level)."""
    pass


class Expression(Node):
    """A node that produces a value when evaluated."""
    pass


# =================================================================
# Root
# =================================================================

class Program(Node):
    """The parse root: the ordered top-level statements of one source text."""
    def __init__(self, statements: List[Statement]):
        self.statements = list(statements)

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __repr__(self) -> str:
        return f"Program({self.statements!r})"


# =================================================================
# Statements
# =================================================================

class LetStatement(Statement):
    """`let name = value;` (also spelled `var`)."""
    def __init__(self, token: Token, name: 'Identifier', value: Optional[Expression]):
        self.token = token
        self.name = name
        self.value = value

    def __repr__(self) -> str:
        return f"<LetStatement name={self.name!r} value={self.value!r}>"


class ReturnStatement(Statement):
    def __init__(self, token: Token, value: Optional[Expression]):
        self.token = token
        self.value = value

    def __repr__(self) -> str:
        return f"<ReturnStatement value={self.value!r}>"


class ExpressionStatement(Statement):
    """A bare expression used as a statement, e.g. `x + 1;`."""
    def __init__(self, token: Token, expression: Optional[Expression]):
        self.token = token
        self.expression = expression

    def __repr__(self) -> str:
        return f"<ExpressionStatement {self.expression!r}>"


class BlockStatement(Statement):
    """A braced sequence of statements; the body of `if`, `else` and `fn`."""
    def __init__(self, token: Token, statements: List[Statement]):
        self.token = token
        self.statements = list(statements)

    def __repr__(self) -> str:
        return f"<BlockStatement {self.statements!r}>"


# =================================================================
# Expressions
# =================================================================

class Identifier(Expression):
    def __init__(self, token: Token, value: str):
        self.token = token
        self.value = value

    def __repr__(self) -> str:
        return f"Identifier<{self.value!r}>"


class IntegerLiteral(Expression):
    def __init__(self, token: Token, value: int):
        self.token = token
        self.value = value

    def __repr__(self) -> str:
        return f"IntegerLiteral<{self.value}>"


class StringLiteral(Expression):
    def __init__(self, token: Token, value: str):
        self.token = token
        self.value = value

    def __repr__(self) -> str:
        return f"StringLiteral<{self.value!r}>"


class Boolean(Expression):
    def __init__(self, token: Token, value: bool):
        self.token = token
        self.value = value

    def __repr__(self) -> str:
        return f"Boolean<{self.value}>"


class PrefixExpression(Expression):
    """`<operator><right>`, e.g. `-x` or `!ok`."""
    def __init__(self, token: Token, operator: str, right: Optional[Expression]):
        self.token = token
        self.operator = operator
        self.right = right

    def __repr__(self) -> str:
        return f"<PrefixExpression {self.operator!r} {self.right!r}>"


class InfixExpression(Expression):
    """`<left> <operator> <right>` for the eight binary operators."""
    def __init__(self, token: Token, left: Optional[Expression], operator: str, right: Optional[Expression]):
        self.token = token
        self.left = left
        self.operator = operator
        self.right = right

    def __repr__(self) -> str:
        return f"<InfixExpression {self.left!r} {self.operator!r} {self.right!r}>"


class IfExpression(Expression):
    def __init__(self, token: Token, condition: Optional[Expression],
                 consequence: BlockStatement, alternative: Optional[BlockStatement] = None):
        self.token = token
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative

    def __repr__(self) -> str:
        return (f"<IfExpression cond={self.condition!r} then={self.consequence!r} "
                f"else={self.alternative!r}>")


class FunctionLiteral(Expression):
    """`fn(<parameters>) { <body> }`."""
    def __init__(self, token: Token, parameters: List[Identifier], body: BlockStatement):
        self.token = token
        self.parameters = list(parameters)
        self.body = body

    def __repr__(self) -> str:
        return f"<FunctionLiteral params={self.parameters!r} body={self.body!r}>"


class CallExpression(Expression):
    """`<function>(<arguments>)`; the callee is any expression."""
    def __init__(self, token: Token, function: Optional[Expression], arguments: List[Optional[Expression]]):
        self.token = token
        self.function = function
        self.arguments = list(arguments)

    def __repr__(self) -> str:
        return f"<CallExpression {self.function!r} args={self.arguments!r}>"


class ArrayLiteral(Expression):
    def __init__(self, token: Token, elements: List[Optional[Expression]]):
        self.token = token
        self.elements = list(elements)

    def __repr__(self) -> str:
        return f"<ArrayLiteral {self.elements!r}>"


class IndexExpression(Expression):
    """`<left>[<index>]` on arrays and hashes."""
    def __init__(self, token: Token, left: Optional[Expression], index: Optional[Expression]):
        self.token = token
        self.left = left
        self.index = index

    def __repr__(self) -> str:
        return f"<IndexExpression {self.left!r}[{self.index!r}]>"


class HashLiteral(Expression):
    """`{k: v, ...}`. Pairs keep their source order, which is also evaluation order."""
    def __init__(self, token: Token, pairs: List[Tuple[Optional[Expression], Optional[Expression]]]):
        self.token = token
        self.pairs = list(pairs)

    def __repr__(self) -> str:
        return f"<HashLiteral {self.pairs!r}>"
