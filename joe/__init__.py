from joe.joe_runtime import ScriptRunner, ExecutionResult, StdLib, builtin_registry
from joe.joe_interpreter import Evaluator
from joe.joe_parser import Parser, parse
from joe.joe_lexer import Lexer
from joe.joe_datatypes import Environment

__all__ = [
    "ScriptRunner", "ExecutionResult", "StdLib", "builtin_registry",
    "Evaluator", "Parser", "parse", "Lexer", "Environment",
]
