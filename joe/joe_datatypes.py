"""
Defines the runtime data types for the Joe language.

This module provides the value domain the evaluator produces (integers,
booleans, strings, null, arrays, hashes, functions and builtins), the two
internal control signals (ReturnValue and Error), the HashKey contract used
to place values into a Hash, and the Environment chain that implements
lexical scoping and closures.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, NamedTuple, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from joe.joe_ast import BlockStatement, Identifier

INTEGER_OBJ = "INTEGER"
BOOLEAN_OBJ = "BOOLEAN"
STRING_OBJ = "STRING"
NULL_OBJ = "NULL"
ARRAY_OBJ = "ARRAY"
HASH_OBJ = "HASH"
FUNCTION_OBJ = "FUNCTION"
BUILTIN_OBJ = "BUILTIN"
RETURN_VALUE_OBJ = "RETURN_VALUE"
ERROR_OBJ = "ERROR"

_INT64_MIN = -2 ** 63
_UINT64 = 2 ** 64


def to_int64(value: int) -> int:
    """Wraps an arbitrary Python int into the signed 64-bit range."""
    return (value - _INT64_MIN) % _UINT64 + _INT64_MIN


# =================================================================
# Abstract Base Classes
# =================================================================

class JoeObject(ABC):
    """Abstract base class for every runtime value."""
    type_name: str = ""

    @abstractmethod
    def inspect(self) -> str:
        """Human-readable rendering used by `puts` and the REPL."""

    def __str__(self) -> str:
        return self.inspect()


class HashKey(NamedTuple):
    """The (type, int) identity a hashable value is stored under in a Hash."""
    type_name: str
    value: int


class HashPair(NamedTuple):
    key: JoeObject
    value: JoeObject


class Hashable(JoeObject):
    """Marks the value types that may be used as hash keys."""

    @abstractmethod
    def hash_key(self) -> HashKey:
        ...


# =================================================================
# Scalar Types
# =================================================================

class Integer(Hashable):
    type_name = INTEGER_OBJ

    def __init__(self, value: int):
        self.value = to_int64(value)

    def inspect(self) -> str:
        return str(self.value)

    def hash_key(self) -> HashKey:
        return HashKey(self.type_name, self.value)

    def __repr__(self) -> str:
        return f"Integer({self.value})"

    def __eq__(self, other):
        if not isinstance(other, Integer):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(self.hash_key())


class Boolean(Hashable):
    """Only the two shared instances TRUE and FALSE should ever exist."""
    type_name = BOOLEAN_OBJ

    def __init__(self, value: bool):
        self.value = value

    def inspect(self) -> str:
        return "true" if self.value else "false"

    def hash_key(self) -> HashKey:
        return HashKey(self.type_name, 1 if self.value else 0)

    def __repr__(self) -> str:
        return f"Boolean({self.value})"


class String(Hashable):
    type_name = STRING_OBJ

    def __init__(self, value: str):
        self.value = value

    def inspect(self) -> str:
        return self.value

    def hash_key(self) -> HashKey:
        # Sum of the SHA-1 digest bytes. Distinct strings can collide.
        digest = hashlib.sha1(self.value.encode("utf-8")).digest()
        return HashKey(self.type_name, sum(digest))

    def __repr__(self) -> str:
        return f"String({self.value!r})"

    def __eq__(self, other):
        if not isinstance(other, String):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(self.value)


class Null(JoeObject):
    """The null value. Use the NULL singleton."""
    type_name = NULL_OBJ

    def inspect(self) -> str:
        return "null"

    def __repr__(self) -> str:
        return "NULL"


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool_to_boolean(value: bool) -> Boolean:
    """Maps a Python bool onto the interned TRUE/FALSE instances."""
    return TRUE if value else FALSE


# =================================================================
# Container Types
# =================================================================

class Array(JoeObject):
    """An ordered sequence of values. Elements are shared, never copied."""
    type_name = ARRAY_OBJ

    def __init__(self, elements: List[JoeObject]):
        self.elements = list(elements)

    def inspect(self) -> str:
        return "[" + ", ".join(e.inspect() for e in self.elements) + "]"

    def __len__(self) -> int:
        return len(self.elements)

    def __repr__(self) -> str:
        return f"Array({self.elements!r})"


class Hash(JoeObject):
    """Maps HashKey -> HashPair, keeping the original key object for display."""
    type_name = HASH_OBJ

    def __init__(self, pairs: Optional[Dict[HashKey, HashPair]] = None):
        self.pairs: Dict[HashKey, HashPair] = dict(pairs or {})

    def inspect(self) -> str:
        items = ", ".join(f"{p.key.inspect()}: {p.value.inspect()}" for p in self.pairs.values())
        return "{" + items + "}"

    def __len__(self) -> int:
        return len(self.pairs)

    def __repr__(self) -> str:
        return f"Hash({list(self.pairs.values())!r})"


# =================================================================
# Callables
# =================================================================

class Function(JoeObject):
    """A user-defined function.

    This is a closure: it bundles the parameter list and body with the
    Environment that was active where the `fn` literal was evaluated. The
    environment is held by reference, so later bindings made in it are
    visible when the function runs.
    """
    type_name = FUNCTION_OBJ

    def __init__(self, parameters: List['Identifier'], body: 'BlockStatement', env: 'Environment'):
        self.parameters = list(parameters)
        self.body = body
        self.env = env

    def inspect(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {{\n{self.body}\n}}"

    def __repr__(self) -> str:
        return f"<Function params={[p.value for p in self.parameters]!r}>"


BuiltinFunction = Callable[..., JoeObject]


class Builtin(JoeObject):
    """Wraps a native Python callable taking Joe objects positionally."""
    type_name = BUILTIN_OBJ

    def __init__(self, fn: BuiltinFunction, name: Optional[str] = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "<builtin>")

    def inspect(self) -> str:
        return "builtin function"

    def __repr__(self) -> str:
        return f"<Builtin {self.name}>"


# =================================================================
# Control Signals
# =================================================================

class ReturnValue(JoeObject):
    """Carries a `return`ed value up to the enclosing call site."""
    type_name = RETURN_VALUE_OBJ

    def __init__(self, value: JoeObject):
        self.value = value

    def inspect(self) -> str:
        return self.value.inspect()

    def __repr__(self) -> str:
        return f"ReturnValue({self.value!r})"


class Error(JoeObject):
    """A runtime error. Once produced it short-circuits every enclosing evaluation."""
    type_name = ERROR_OBJ

    def __init__(self, message: str):
        self.message = message

    def inspect(self) -> str:
        return f"ERROR: {self.message}"

    def __repr__(self) -> str:
        return f"Error({self.message!r})"

    def __eq__(self, other):
        if not isinstance(other, Error):
            return NotImplemented
        return self.message == other.message

    def __hash__(self):
        return hash(self.message)


# =================================================================
# Environment
# =================================================================

class Environment:
    """One frame of bindings plus a link to its enclosing frame.

    Lookup walks outward to the first frame that binds the name. Writes always
    go to this frame: there is no assigning through to an outer binding.
    """
    def __init__(self, outer: Optional['Environment'] = None):
        self.bindings: Dict[str, JoeObject] = {}
        self.outer = outer

    def find_owner(self, name: str) -> Optional['Environment']:
        """Finds the frame in the chain (self, then outward) that binds name."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.bindings:
                return env
            env = env.outer
        return None

    def get(self, name: str, default: Any = None) -> Any:
        owner = self.find_owner(name)
        if owner is None:
            return default
        return owner.bindings[name]

    def set(self, name: str, value: JoeObject) -> JoeObject:
        self.bindings[name] = value
        return value

    def __getitem__(self, name: str) -> JoeObject:
        owner = self.find_owner(name)
        if owner is None:
            raise KeyError(name)
        return owner.bindings[name]

    def __setitem__(self, name: str, value: JoeObject):
        self.set(name, value)

    def __contains__(self, name: str) -> bool:
        return self.find_owner(name) is not None

    def keys(self):
        """Names bound in this frame only."""
        return self.bindings.keys()

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        outer_id = f", outer=#{id(self.outer)}" if self.outer else ""
        return f"<Environment bindings=[{keys}]{outer_id}>"
