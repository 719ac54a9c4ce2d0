"""
The Joe scanner: turns raw source text into a stream of Tokens.
"""
from typing import Iterator

from joe import joe_tokens as tokens
from joe.joe_tokens import Token

NUL = "\0"

# Single characters that always map to exactly one token kind.
_SINGLE_CHAR_TOKENS = {
    "+": tokens.PLUS,
    "-": tokens.MINUS,
    "*": tokens.ASTERISK,
    "<": tokens.LT,
    ">": tokens.GT,
    ";": tokens.SEMICOLON,
    ":": tokens.COLON,
    ",": tokens.COMMA,
    "(": tokens.LPAREN,
    ")": tokens.RPAREN,
    "{": tokens.LBRACE,
    "}": tokens.RBRACE,
    "[": tokens.LBRACKET,
    "]": tokens.RBRACKET,
}


def _is_letter(ch: str) -> bool:
    return ch != NUL and ch.isalpha()


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Scans source text one character at a time with a single character of lookahead.

    `position` points at the current character `ch`; `read_position` points just
    after it. Past the end of input `ch` is the NUL sentinel, which surfaces
    externally as an EOF token.
    """
    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.read_position = 0
        self.ch = NUL
        self._read_char()

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == tokens.EOF:
                return

    def next_token(self) -> Token:
        while True:
            self._skip_whitespace()
            ch = self.ch

            if ch == "/" and self.peek_char() == "/":
                self._skip_line()
                continue

            if ch in _SINGLE_CHAR_TOKENS:
                tok = Token(_SINGLE_CHAR_TOKENS[ch], ch)
            elif ch == "/":
                tok = Token(tokens.SLASH, ch)
            elif ch == "=":
                if self.peek_char() == "=":
                    self._read_char()
                    tok = Token(tokens.EQ, "==")
                else:
                    tok = Token(tokens.ASSIGN, ch)
            elif ch == "!":
                if self.peek_char() == "=":
                    self._read_char()
                    tok = Token(tokens.NOT_EQ, "!=")
                else:
                    tok = Token(tokens.BANG, ch)
            elif ch == '"':
                tok = Token(tokens.STRING, self._read_string())
            elif ch == NUL:
                tok = Token(tokens.EOF, "")
            elif _is_letter(ch):
                # Identifier and number readers leave the cursor on the next char.
                literal = self._read_identifier()
                return Token(tokens.lookup_ident(literal), literal)
            elif _is_digit(ch):
                return Token(tokens.INT, self._read_number())
            else:
                tok = Token(tokens.ILLEGAL, ch)

            self._read_char()
            return tok

    def peek_char(self) -> str:
        if self.read_position >= len(self.source):
            return NUL
        return self.source[self.read_position]

    def _read_char(self):
        if self.read_position >= len(self.source):
            self.ch = NUL
        else:
            self.ch = self.source[self.read_position]
        self.position = self.read_position
        self.read_position += 1

    def _skip_whitespace(self):
        while self.ch in (" ", "\t", "\n", "\r"):
            self._read_char()

    def _skip_line(self):
        while self.ch not in ("\n", "\r", NUL):
            self._read_char()

    def _read_identifier(self) -> str:
        start = self.position
        while _is_letter(self.ch):
            self._read_char()
        return self.source[start:self.position]

    def _read_number(self) -> str:
        start = self.position
        while _is_digit(self.ch):
            self._read_char()
        return self.source[start:self.position]

    def _read_string(self) -> str:
        # Verbatim up to the closing quote or end of input; no escapes.
        start = self.position + 1
        while True:
            self._read_char()
            if self.ch == '"' or self.ch == NUL:
                break
        return self.source[start:self.position]
