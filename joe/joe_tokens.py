"""
Token model for the Joe scanner and parser.

Token kinds are plain strings so they can be dropped straight into parser
diagnostics ("expected next token to be ), got EOF instead").
"""
from dataclasses import dataclass
from typing import Dict

ILLEGAL = "ILLEGAL"
EOF = "EOF"

# Identifiers + literals
IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

# Operators
ASSIGN = "="
PLUS = "+"
MINUS = "-"
BANG = "!"
ASTERISK = "*"
SLASH = "/"
LT = "<"
GT = ">"
EQ = "=="
NOT_EQ = "!="

# Delimiters
COMMA = ","
SEMICOLON = ";"
COLON = ":"
LPAREN = "("
RPAREN = ")"
LBRACE = "{"
RBRACE = "}"
LBRACKET = "["
RBRACKET = "]"

# Keywords
FUNCTION = "FUNCTION"
LET = "LET"
TRUE = "TRUE"
FALSE = "FALSE"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"

KEYWORDS: Dict[str, str] = {
    "fn": FUNCTION,
    "let": LET,
    "var": LET,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
}


@dataclass(frozen=True)
class Token:
    """A single lexeme: its kind plus the exact source text it came from."""
    type: str
    literal: str

    def __repr__(self) -> str:
        return f"Token({self.type!r}, {self.literal!r})"


def lookup_ident(ident: str) -> str:
    """Classifies a run of letters as a keyword kind or a plain identifier."""
    return KEYWORDS.get(ident, IDENT)
