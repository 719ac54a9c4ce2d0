"""
The core Joe interpreter: a recursive evaluator over the AST.
"""
import os
import sys
from typing import Dict, List, Optional, Union

from joe import joe_ast as ast
from joe.joe_datatypes import (
    JoeObject, Hashable, HashPair, Environment,
    Integer, String, Array, Hash, Function, Builtin, ReturnValue, Error,
    TRUE, FALSE, NULL, native_bool_to_boolean,
)


# Helpers: identify and unwrap control-flow signals
def is_error(obj) -> bool:
    return isinstance(obj, Error)


def is_return(obj) -> bool:
    return isinstance(obj, ReturnValue)


def is_signal(obj) -> bool:
    return isinstance(obj, (ReturnValue, Error))


def unwrap_return(obj):
    return obj.value if is_return(obj) else obj


def is_truthy(obj) -> bool:
    if obj is NULL:
        return False
    if obj is TRUE:
        return True
    if obj is FALSE:
        return False
    return True


def _int_div(left: int, right: int) -> int:
    # Truncates toward zero, like 64-bit machine division.
    quotient = abs(left) // abs(right)
    return quotient if (left >= 0) == (right >= 0) else -quotient


class Evaluator:
    """The Joe execution engine.

    Builtins are injected at construction so independent evaluators never
    share a registry. Identifier resolution checks the builtins first, so a
    builtin name cannot be shadowed by a user binding.
    """
    def __init__(self, builtins: Optional[Dict[str, Builtin]] = None):
        if builtins is None:
            from joe.joe_runtime import StdLib, builtin_registry
            builtins = builtin_registry(StdLib())
        self.builtins: Dict[str, Builtin] = dict(builtins)
        self.call_depth = 0
        self.debug = bool(os.environ.get("JOE_DEBUG"))

    def _dbg(self, *parts):
        if self.debug:
            print("[DBG]", *parts, file=sys.stderr)

    def eval(self, node, env: Environment) -> Optional[JoeObject]:
        """Public entry point for evaluation. Unwraps a top-level `return`."""
        return unwrap_return(self._eval(node, env))

    def _eval(self, node, env: Environment) -> Optional[JoeObject]:
        """Recursive dispatcher for evaluating any AST node."""
        match node:
            # Statements
            case ast.Program():
                return self._eval_program(node, env)
            case ast.BlockStatement():
                return self._eval_block(node, env)
            case ast.ExpressionStatement():
                return self._eval(node.expression, env)
            case ast.LetStatement():
                value = self._eval(node.value, env)
                if is_signal(value):
                    return value
                env.set(node.name.value, value)
                return None
            case ast.ReturnStatement():
                value = self._eval(node.value, env)
                if is_signal(value):
                    return value
                return ReturnValue(value)

            # Literals
            case ast.IntegerLiteral():
                return Integer(node.value)
            case ast.StringLiteral():
                return String(node.value)
            case ast.Boolean():
                return native_bool_to_boolean(node.value)
            case ast.ArrayLiteral():
                elements = self._eval_expressions(node.elements, env)
                if is_signal(elements):
                    return elements
                return Array(elements)
            case ast.HashLiteral():
                return self._eval_hash_literal(node, env)
            case ast.FunctionLiteral():
                return Function(node.parameters, node.body, env)

            # Expressions
            case ast.Identifier():
                return self._eval_identifier(node, env)
            case ast.PrefixExpression():
                right = self._eval(node.right, env)
                if is_signal(right):
                    return right
                return self._eval_prefix_expression(node.operator, right)
            case ast.InfixExpression():
                left = self._eval(node.left, env)
                if is_signal(left):
                    return left
                right = self._eval(node.right, env)
                if is_signal(right):
                    return right
                return self._eval_infix_expression(node.operator, left, right)
            case ast.IfExpression():
                return self._eval_if_expression(node, env)
            case ast.CallExpression():
                function = self._eval(node.function, env)
                if is_signal(function):
                    return function
                args = self._eval_expressions(node.arguments, env)
                if is_signal(args):
                    return args
                return self.apply_function(function, args)
            case ast.IndexExpression():
                left = self._eval(node.left, env)
                if is_signal(left):
                    return left
                index = self._eval(node.index, env)
                if is_signal(index):
                    return index
                return self._eval_index_expression(left, index)

        return None

    # --- Statement sequences ---

    def _eval_program(self, program: ast.Program, env: Environment) -> Optional[JoeObject]:
        result = None
        for stmt in program.statements:
            result = self._eval(stmt, env)
            if is_return(result):
                return result.value
            if is_error(result):
                return result
        return result

    def _eval_block(self, block: ast.BlockStatement, env: Environment) -> Optional[JoeObject]:
        # A block does not unwrap `return`; only the call site does.
        result = None
        for stmt in block.statements:
            result = self._eval(stmt, env)
            if is_return(result) or is_error(result):
                return result
        # An empty block, or one ending in `let`, still yields a value.
        return result if result is not None else NULL

    def _eval_expressions(self, exprs: List[ast.Expression], env: Environment) -> Union[List[JoeObject], Error, ReturnValue]:
        """Evaluates left to right, stopping at the first error or `return` signal."""
        results = []
        for expr in exprs:
            value = self._eval(expr, env)
            if is_signal(value):
                return value
            results.append(value)
        return results

    # --- Identifiers ---

    def _eval_identifier(self, node: ast.Identifier, env: Environment) -> JoeObject:
        builtin = self.builtins.get(node.value)
        if builtin is not None:
            return builtin
        value = env.get(node.value)
        if value is None:
            return Error(f"identifier not found: {node.value}")
        return value

    # --- Operators ---

    def _eval_prefix_expression(self, operator: str, right: JoeObject) -> JoeObject:
        match operator:
            case "!":
                return FALSE if is_truthy(right) else TRUE
            case "-":
                if not isinstance(right, Integer):
                    return Error(f"unknown operator: -{right.type_name}")
                return Integer(-right.value)
            case _:
                return Error(f"unknown operator: {operator}{right.type_name}")

    def _eval_infix_expression(self, operator: str, left: JoeObject, right: JoeObject) -> JoeObject:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return self._eval_integer_infix_expression(operator, left, right)
        if isinstance(left, String) and isinstance(right, String):
            return self._eval_string_infix_expression(operator, left, right)
        if left.type_name != right.type_name:
            return Error(f"type mismatch: {left.type_name} {operator} {right.type_name}")
        # Remaining same-type operands compare by identity (booleans are interned).
        match operator:
            case "==":
                return native_bool_to_boolean(left is right)
            case "!=":
                return native_bool_to_boolean(left is not right)
            case _:
                return Error(f"unknown operator: {left.type_name} {operator} {right.type_name}")

    def _eval_integer_infix_expression(self, operator: str, left: Integer, right: Integer) -> JoeObject:
        a, b = left.value, right.value
        match operator:
            case "+":
                return Integer(a + b)
            case "-":
                return Integer(a - b)
            case "*":
                return Integer(a * b)
            case "/":
                if b == 0:
                    return Error("division by zero")
                return Integer(_int_div(a, b))
            case "<":
                return native_bool_to_boolean(a < b)
            case ">":
                return native_bool_to_boolean(a > b)
            case "==":
                return native_bool_to_boolean(a == b)
            case "!=":
                return native_bool_to_boolean(a != b)
            case _:
                return Error(f"unknown operator: {left.type_name} {operator} {right.type_name}")

    def _eval_string_infix_expression(self, operator: str, left: String, right: String) -> JoeObject:
        if operator != "+":
            return Error(f"unknown operator: {left.type_name} {operator} {right.type_name}")
        return String(left.value + right.value)

    # --- Conditionals ---

    def _eval_if_expression(self, node: ast.IfExpression, env: Environment) -> Optional[JoeObject]:
        condition = self._eval(node.condition, env)
        if is_signal(condition):
            return condition
        if is_truthy(condition):
            return self._eval(node.consequence, env)
        if node.alternative is not None:
            return self._eval(node.alternative, env)
        return NULL

    # --- Collections ---

    def _eval_index_expression(self, left: JoeObject, index: JoeObject) -> JoeObject:
        if isinstance(left, Array) and isinstance(index, Integer):
            i = index.value
            if 0 <= i < len(left.elements):
                return left.elements[i]
            return NULL
        if isinstance(left, Hash):
            if not isinstance(index, Hashable):
                return Error(f"unusable as hash key: {index.type_name}")
            pair = left.pairs.get(index.hash_key())
            return pair.value if pair is not None else NULL
        return Error(f"index operator not supported: {left.type_name}")

    def _eval_hash_literal(self, node: ast.HashLiteral, env: Environment) -> JoeObject:
        pairs = {}
        for key_node, value_node in node.pairs:
            key = self._eval(key_node, env)
            if is_signal(key):
                return key
            value = self._eval(value_node, env)
            if is_signal(value):
                return value
            if not isinstance(key, Hashable):
                return Error(f"unusable as hash key: {key.type_name}")
            pairs[key.hash_key()] = HashPair(key, value)
        return Hash(pairs)

    # --- Calls ---

    def apply_function(self, function: JoeObject, args: List[JoeObject]) -> JoeObject:
        """Applies a Function or Builtin to already-evaluated arguments."""
        match function:
            case Function():
                if self.debug:
                    self._dbg("CALL", f"depth={self.call_depth}", function.inspect().splitlines()[0], "args:", [a.inspect() for a in args])
                call_env = self._extend_function_env(function, args)
                self.call_depth += 1
                try:
                    result = self._eval(function.body, call_env)
                finally:
                    self.call_depth -= 1
                return unwrap_return(result)
            case Builtin():
                if self.debug:
                    self._dbg("BUILTIN", function.name, "args:", [a.inspect() for a in args])
                return function.fn(*args)
            case _:
                return Error(f"not a function: {function.type_name}")

    def _extend_function_env(self, function: Function, args: List[JoeObject]) -> Environment:
        env = Environment(outer=function.env)
        # Surplus arguments are ignored; missing parameters stay unbound.
        for param, arg in zip(function.parameters, args):
            env.set(param.value, arg)
        return env
