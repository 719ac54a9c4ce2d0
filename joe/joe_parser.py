"""
Recursive-descent, precedence-climbing ("Pratt") parser for Joe.

The parser never raises on malformed input. Each failed production appends a
diagnostic to `errors` and yields None in place of the sub-tree, so a single
pass can report several problems. Callers must check `errors` before
trusting the returned Program.
"""
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Tuple

from joe import joe_tokens as tokens
from joe.joe_tokens import Token
from joe.joe_lexer import Lexer
from joe.joe_ast import (
    Program, Statement, Expression,
    LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, StringLiteral, Boolean, PrefixExpression,
    InfixExpression, IfExpression, FunctionLiteral, CallExpression,
    ArrayLiteral, IndexExpression, HashLiteral,
)

INT64_MAX = 2 ** 63 - 1


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # == !=
    LESSGREATER = 3  # < >
    SUM = 4          # + -
    PRODUCT = 5      # * /
    PREFIX = 6       # -x !x
    CALL = 7         # f(x)
    INDEX = 8        # a[i]


PRECEDENCES: Dict[str, Precedence] = {
    tokens.EQ: Precedence.EQUALS,
    tokens.NOT_EQ: Precedence.EQUALS,
    tokens.LT: Precedence.LESSGREATER,
    tokens.GT: Precedence.LESSGREATER,
    tokens.PLUS: Precedence.SUM,
    tokens.MINUS: Precedence.SUM,
    tokens.SLASH: Precedence.PRODUCT,
    tokens.ASTERISK: Precedence.PRODUCT,
    tokens.LPAREN: Precedence.CALL,
    tokens.LBRACKET: Precedence.INDEX,
}

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Optional[Expression]], Optional[Expression]]


class Parser:
    """Builds a Program from the tokens of a Lexer, keeping two tokens of lookahead."""
    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.errors: List[str] = []

        self.cur_token: Token = Token(tokens.EOF, "")
        self.peek_token: Token = Token(tokens.EOF, "")

        self.prefix_parse_fns: Dict[str, PrefixParseFn] = {
            tokens.IDENT: self.parse_identifier,
            tokens.INT: self.parse_integer_literal,
            tokens.STRING: self.parse_string_literal,
            tokens.MINUS: self.parse_prefix_expression,
            tokens.BANG: self.parse_prefix_expression,
            tokens.TRUE: self.parse_boolean,
            tokens.FALSE: self.parse_boolean,
            tokens.LPAREN: self.parse_grouped_expression,
            tokens.IF: self.parse_if_expression,
            tokens.FUNCTION: self.parse_function_literal,
            tokens.LBRACKET: self.parse_array_literal,
            tokens.LBRACE: self.parse_hash_literal,
        }
        self.infix_parse_fns: Dict[str, InfixParseFn] = {
            tokens.PLUS: self.parse_infix_expression,
            tokens.MINUS: self.parse_infix_expression,
            tokens.SLASH: self.parse_infix_expression,
            tokens.ASTERISK: self.parse_infix_expression,
            tokens.EQ: self.parse_infix_expression,
            tokens.NOT_EQ: self.parse_infix_expression,
            tokens.LT: self.parse_infix_expression,
            tokens.GT: self.parse_infix_expression,
            tokens.LPAREN: self.parse_call_expression,
            tokens.LBRACKET: self.parse_index_expression,
        }

        # Read two tokens so cur_token and peek_token are both set.
        self.advance()
        self.advance()

    # --- Token cursor ---

    def advance(self):
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, token_type: str) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: str) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: str) -> bool:
        """Advances when the next token has the given kind; records an error otherwise."""
        if self.peek_token_is(token_type):
            self.advance()
            return True
        self.peek_error(token_type)
        return False

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    # --- Diagnostics ---

    def peek_error(self, token_type: str):
        self.errors.append(
            f"expected next token to be {token_type}, got {self.peek_token.type} instead"
        )

    def no_prefix_parse_fn_error(self, token_type: str):
        self.errors.append(f"no prefix parse function for {token_type} found")

    # --- Statements ---

    def parse_program(self) -> Program:
        statements: List[Statement] = []
        while not self.cur_token_is(tokens.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.advance()
        return Program(statements)

    def parse_statement(self) -> Optional[Statement]:
        match self.cur_token.type:
            case tokens.LET:
                return self.parse_let_statement()
            case tokens.RETURN:
                return self.parse_return_statement()
            case _:
                return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        token = self.cur_token

        if not self.expect_peek(tokens.IDENT):
            return None
        name = Identifier(self.cur_token, self.cur_token.literal)

        if not self.expect_peek(tokens.ASSIGN):
            return None

        self.advance()
        value = self.parse_expression(Precedence.LOWEST)

        if self.peek_token_is(tokens.SEMICOLON):
            self.advance()
        return LetStatement(token, name, value)

    def parse_return_statement(self) -> ReturnStatement:
        token = self.cur_token
        self.advance()
        value = self.parse_expression(Precedence.LOWEST)

        if self.peek_token_is(tokens.SEMICOLON):
            self.advance()
        return ReturnStatement(token, value)

    def parse_expression_statement(self) -> ExpressionStatement:
        token = self.cur_token
        expression = self.parse_expression(Precedence.LOWEST)

        if self.peek_token_is(tokens.SEMICOLON):
            self.advance()
        return ExpressionStatement(token, expression)

    def parse_block_statement(self) -> BlockStatement:
        token = self.cur_token
        statements: List[Statement] = []
        self.advance()

        while not self.cur_token_is(tokens.RBRACE) and not self.cur_token_is(tokens.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.advance()
        return BlockStatement(token, statements)

    # --- Expressions ---

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token.type)
            return None
        left = prefix()

        while not self.peek_token_is(tokens.SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.advance()
            left = infix(left)

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Optional[Expression]:
        literal = self.cur_token.literal
        try:
            value = int(literal)
        except ValueError:
            value = None
        if value is None or value > INT64_MAX:
            self.errors.append(f"could not parse {literal} as integer")
            return None
        return IntegerLiteral(self.cur_token, value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token, self.cur_token_is(tokens.TRUE))

    def parse_prefix_expression(self) -> Expression:
        token = self.cur_token
        self.advance()
        right = self.parse_expression(Precedence.PREFIX)
        return PrefixExpression(token, token.literal, right)

    def parse_infix_expression(self, left: Optional[Expression]) -> Expression:
        token = self.cur_token
        precedence = self.cur_precedence()
        self.advance()
        right = self.parse_expression(precedence)
        return InfixExpression(token, left, token.literal, right)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.advance()
        expression = self.parse_expression(Precedence.LOWEST)
        if not self.expect_peek(tokens.RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Optional[Expression]:
        token = self.cur_token

        if not self.expect_peek(tokens.LPAREN):
            return None
        self.advance()
        condition = self.parse_expression(Precedence.LOWEST)
        if not self.expect_peek(tokens.RPAREN):
            return None
        if not self.expect_peek(tokens.LBRACE):
            return None
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_token_is(tokens.ELSE):
            self.advance()
            if not self.expect_peek(tokens.LBRACE):
                return None
            alternative = self.parse_block_statement()

        return IfExpression(token, condition, consequence, alternative)

    def parse_function_literal(self) -> Optional[Expression]:
        token = self.cur_token

        if not self.expect_peek(tokens.LPAREN):
            return None
        parameters = self.parse_function_parameters()
        if parameters is None:
            return None
        if not self.expect_peek(tokens.LBRACE):
            return None
        body = self.parse_block_statement()

        return FunctionLiteral(token, parameters, body)

    def parse_function_parameters(self) -> Optional[List[Identifier]]:
        identifiers: List[Identifier] = []

        if self.peek_token_is(tokens.RPAREN):
            self.advance()
            return identifiers

        if not self.expect_peek(tokens.IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        while self.peek_token_is(tokens.COMMA):
            self.advance()
            if not self.expect_peek(tokens.IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        if not self.expect_peek(tokens.RPAREN):
            return None
        return identifiers

    def parse_call_expression(self, function: Optional[Expression]) -> Optional[Expression]:
        token = self.cur_token
        arguments = self.parse_expression_list(tokens.RPAREN)
        if arguments is None:
            return None
        return CallExpression(token, function, arguments)

    def parse_array_literal(self) -> Optional[Expression]:
        token = self.cur_token
        elements = self.parse_expression_list(tokens.RBRACKET)
        if elements is None:
            return None
        return ArrayLiteral(token, elements)

    def parse_index_expression(self, left: Optional[Expression]) -> Optional[Expression]:
        token = self.cur_token
        self.advance()
        index = self.parse_expression(Precedence.LOWEST)
        if not self.expect_peek(tokens.RBRACKET):
            return None
        return IndexExpression(token, left, index)

    def parse_hash_literal(self) -> Optional[Expression]:
        token = self.cur_token
        pairs = self.parse_expression_list(tokens.RBRACE, self.parse_hash_pair)
        if pairs is None:
            return None
        return HashLiteral(token, pairs)

    def parse_hash_pair(self) -> Optional[Tuple[Optional[Expression], Optional[Expression]]]:
        key = self.parse_expression(Precedence.LOWEST)
        if not self.expect_peek(tokens.COLON):
            return None
        self.advance()
        value = self.parse_expression(Precedence.LOWEST)
        return key, value

    def parse_expression_list(self, end: str, parse_item: Optional[Callable[[], Any]] = None) -> Optional[List[Any]]:
        """Comma-separated items up to the `end` token; shared by calls, arrays and hashes.

        Items are full expressions unless `parse_item` is given. A custom item
        parser returns None to abort the whole list.
        """
        items: List[Any] = []

        if self.peek_token_is(end):
            self.advance()
            return items

        while True:
            self.advance()
            if parse_item is None:
                items.append(self.parse_expression(Precedence.LOWEST))
            else:
                item = parse_item()
                if item is None:
                    return None
                items.append(item)
            if not self.peek_token_is(tokens.COMMA):
                break
            self.advance()

        if not self.expect_peek(end):
            return None
        return items


def parse(source: str) -> Tuple[Program, List[str]]:
    """Parses source text, returning the Program and any diagnostics."""
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors
