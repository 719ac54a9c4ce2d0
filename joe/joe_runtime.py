"""
The Joe runtime: the builtin library and the script runner.
"""

import inspect
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, TextIO

from joe.joe_parser import parse
from joe.joe_interpreter import Evaluator, is_error
from joe.joe_datatypes import (
    JoeObject, Environment, Integer, String, Array, Builtin, Error, NULL,
)

# ===================================================================
# 1. The Standard Library
# ===================================================================

def _arity_error(got: int, want: int) -> Error:
    return Error(f"wrong number of arguments. got={got}, want={want}")


class StdLib:
    """Contains Python implementations for all Joe builtins.

    Every method named `_<name>` becomes the builtin `<name>`. Console I/O
    goes through the configured streams so hosts and tests can redirect it.
    """
    def __init__(self, stdout: Optional[TextIO] = None, stdin: Optional[TextIO] = None):
        self._stdout = stdout
        self._stdin = stdin

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stdin(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    # --- Collections ---
    def _len(self, *args):
        if len(args) != 1:
            return _arity_error(len(args), 1)
        match args[0]:
            case String() as s:
                return Integer(len(s.value))
            case Array() as arr:
                return Integer(len(arr.elements))
            case other:
                return Error(f"argument to 'len' not supported. got={other.type_name}")

    def _first(self, *args):
        if len(args) != 1:
            return _arity_error(len(args), 1)
        arr = args[0]
        if not isinstance(arr, Array):
            return Error(f"argument to 'first' must be an ARRAY. got={arr.type_name}")
        return arr.elements[0] if arr.elements else NULL

    def _last(self, *args):
        if len(args) != 1:
            return _arity_error(len(args), 1)
        arr = args[0]
        if not isinstance(arr, Array):
            return Error(f"argument to 'last' must be an ARRAY. got={arr.type_name}")
        return arr.elements[-1] if arr.elements else NULL

    def _rest(self, *args):
        if len(args) != 1:
            return _arity_error(len(args), 1)
        arr = args[0]
        if not isinstance(arr, Array):
            return Error(f"argument to 'rest' must be an ARRAY. got={arr.type_name}")
        if not arr.elements:
            return NULL
        return Array(arr.elements[1:])

    def _push(self, *args):
        # Returns a new array; the argument is left untouched.
        if len(args) != 2:
            return _arity_error(len(args), 2)
        arr, item = args
        if not isinstance(arr, Array):
            return Error(f"argument to 'push' must be an ARRAY. got={arr.type_name}")
        return Array(arr.elements + [item])

    # --- Console and files ---
    def _puts(self, *args):
        for arg in args:
            print(arg.inspect(), file=self.stdout)
        return NULL

    def _readline(self, *args):
        if len(args) != 0:
            return _arity_error(len(args), 0)
        line = self.stdin.readline()
        return String(line.rstrip("\r\n"))

    def _readfile(self, *args):
        if len(args) != 1:
            return _arity_error(len(args), 1)
        path = args[0]
        if not isinstance(path, String):
            return Error(f"argument to 'readfile' must be a STRING. got={path.type_name}")
        try:
            with open(path.value, encoding="utf-8") as f:
                return String(f.read())
        except (OSError, UnicodeDecodeError) as e:
            reason = getattr(e, "strerror", None) or str(e)
            return Error(f"could not read file: {path.value}: {reason}")


def builtin_registry(stdlib: StdLib) -> Dict[str, Builtin]:
    """Collects the `_name` methods of a StdLib into a {name: Builtin} table."""
    registry: Dict[str, Builtin] = {}
    for name, member in inspect.getmembers(stdlib):
        if name.startswith('_') and not name.startswith('__') and inspect.ismethod(member):
            joe_name = name[1:]
            registry[joe_name] = Builtin(member, joe_name)
    return registry


# ===================================================================
# 2. Script Execution
# ===================================================================

@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Optional[JoeObject] = None
    error_message: Optional[str] = None
    parse_errors: List[str] = field(default_factory=list)

    def format_error(self) -> str:
        """Formats parse diagnostics or the runtime error for display."""
        if self.status != 'error':
            return ""
        if self.parse_errors:
            lines = ["Encountered parser errors:"]
            lines.extend(f"\t{err}" for err in self.parse_errors)
            return "\n".join(lines)
        return f"ERROR: {self.error_message or 'Unknown error'}"


# Each Joe call costs about a dozen Python frames.
RECURSION_LIMIT = 10000


class ScriptRunner:
    """Parses and executes Joe code against one persistent root environment."""

    def __init__(self, stdout: Optional[TextIO] = None, stdin: Optional[TextIO] = None):
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        self.stdlib = StdLib(stdout=stdout, stdin=stdin)
        self.evaluator = Evaluator(builtins=builtin_registry(self.stdlib))
        self.root_env = Environment()

    def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        # 1. Parse
        program, errors = parse(source_code)
        if errors:
            return ExecutionResult(status='error', parse_errors=list(errors))

        # 2. Evaluate
        try:
            result = self.evaluator.eval(program, self.root_env)
        except RecursionError:
            return ExecutionResult(status='error', error_message="InternalError: maximum recursion depth exceeded")

        if is_error(result):
            return ExecutionResult(status='error', value=result, error_message=result.message)
        return ExecutionResult(status='success', value=result)
