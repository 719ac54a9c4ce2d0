import pytest
from joe import joe_tokens as tokens
from joe.joe_lexer import Lexer
from joe.joe_parser import Parser, Precedence, parse
from joe.joe_ast import (
    LetStatement, ReturnStatement, ExpressionStatement, Identifier, IntegerLiteral,
    StringLiteral, Boolean, PrefixExpression, InfixExpression, IfExpression,
    FunctionLiteral, CallExpression, ArrayLiteral, IndexExpression, HashLiteral,
)

# --- Test Setup and Fixtures ---

def parse_ok(source: str):
    """Parses source and fails the test on any parser diagnostic."""
    program, errors = parse(source)
    assert errors == [], f"parser errors: {errors}"
    return program


def single_expression(source: str):
    program = parse_ok(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExpressionStatement)
    return stmt.expression


def assert_literal(expr, expected):
    match expected:
        case bool():
            assert isinstance(expr, Boolean)
            assert expr.value is expected
            assert expr.token_literal() == ("true" if expected else "false")
        case int():
            assert isinstance(expr, IntegerLiteral)
            assert expr.value == expected
            assert expr.token_literal() == str(expected)
        case str():
            assert isinstance(expr, Identifier)
            assert expr.value == expected
            assert expr.token_literal() == expected


def assert_infix(expr, left, operator, right):
    assert isinstance(expr, InfixExpression)
    assert_literal(expr.left, left)
    assert expr.operator == operator
    assert_literal(expr.right, right)


# --- Statements ---

@pytest.mark.parametrize("source,name,value", [
    ("let x = 5;", "x", 5),
    ("let y = true;", "y", True),
    ("let foobar = y;", "foobar", "y"),
    ("var z = 10", "z", 10),
])
def test_let_statements(source, name, value):
    program = parse_ok(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, LetStatement)
    assert stmt.name.value == name
    assert_literal(stmt.value, value)


@pytest.mark.parametrize("source,value", [
    ("return 5;", 5),
    ("return true;", True),
    ("return foobar", "foobar"),
])
def test_return_statements(source, value):
    program = parse_ok(source)
    stmt = program.statements[0]
    assert isinstance(stmt, ReturnStatement)
    assert stmt.token_literal() == "return"
    assert_literal(stmt.value, value)


def test_trailing_semicolons_are_optional():
    program = parse_ok("let a = 1\nlet b = 2\na + b")
    assert [type(s) for s in program.statements] == [LetStatement, LetStatement, ExpressionStatement]


# --- Expressions ---

def test_identifier_expression():
    assert_literal(single_expression("foobar;"), "foobar")


def test_integer_literal_expression():
    assert_literal(single_expression("5;"), 5)


def test_string_literal_expression():
    expr = single_expression('"hello world";')
    assert isinstance(expr, StringLiteral)
    assert expr.value == "hello world"


@pytest.mark.parametrize("source,operator,value", [
    ("!5;", "!", 5),
    ("-15;", "-", 15),
    ("!foobar;", "!", "foobar"),
    ("-foobar;", "-", "foobar"),
    ("!true;", "!", True),
    ("!false;", "!", False),
])
def test_prefix_expressions(source, operator, value):
    expr = single_expression(source)
    assert isinstance(expr, PrefixExpression)
    assert expr.operator == operator
    assert_literal(expr.right, value)


@pytest.mark.parametrize("source,left,operator,right", [
    ("5 + 5;", 5, "+", 5),
    ("5 - 5;", 5, "-", 5),
    ("5 * 5;", 5, "*", 5),
    ("5 / 5;", 5, "/", 5),
    ("5 > 5;", 5, ">", 5),
    ("5 < 5;", 5, "<", 5),
    ("5 == 5;", 5, "==", 5),
    ("5 != 5;", 5, "!=", 5),
    ("foobar + barfoo;", "foobar", "+", "barfoo"),
    ("true == true", True, "==", True),
    ("true != false", True, "!=", False),
])
def test_infix_expressions(source, left, operator, right):
    assert_infix(single_expression(source), left, operator, right)


def test_if_expression():
    expr = single_expression("if (x < y) { x }")
    assert isinstance(expr, IfExpression)
    assert_infix(expr.condition, "x", "<", "y")
    assert len(expr.consequence.statements) == 1
    assert_literal(expr.consequence.statements[0].expression, "x")
    assert expr.alternative is None


def test_if_else_expression():
    expr = single_expression("if (x < y) { x } else { y }")
    assert isinstance(expr, IfExpression)
    assert_literal(expr.alternative.statements[0].expression, "y")


def test_function_literal():
    expr = single_expression("fn(x, y) { x + y; }")
    assert isinstance(expr, FunctionLiteral)
    assert [p.value for p in expr.parameters] == ["x", "y"]
    assert len(expr.body.statements) == 1
    assert_infix(expr.body.statements[0].expression, "x", "+", "y")


@pytest.mark.parametrize("source,expected", [
    ("fn() {};", []),
    ("fn(x) {};", ["x"]),
    ("fn(x, y, z) {};", ["x", "y", "z"]),
])
def test_function_parameters(source, expected):
    expr = single_expression(source)
    assert [p.value for p in expr.parameters] == expected


def test_call_expression():
    expr = single_expression("add(1, 2 * 3, 4 + 5);")
    assert isinstance(expr, CallExpression)
    assert_literal(expr.function, "add")
    assert len(expr.arguments) == 3
    assert_literal(expr.arguments[0], 1)
    assert_infix(expr.arguments[1], 2, "*", 3)
    assert_infix(expr.arguments[2], 4, "+", 5)


def test_array_literal():
    expr = single_expression("[1, 2 * 2, 3 + 3]")
    assert isinstance(expr, ArrayLiteral)
    assert len(expr.elements) == 3
    assert_literal(expr.elements[0], 1)
    assert_infix(expr.elements[1], 2, "*", 2)


def test_empty_array_literal():
    expr = single_expression("[]")
    assert isinstance(expr, ArrayLiteral)
    assert expr.elements == []


def test_index_expression():
    expr = single_expression("myArray[1 + 1]")
    assert isinstance(expr, IndexExpression)
    assert_literal(expr.left, "myArray")
    assert_infix(expr.index, 1, "+", 1)


def test_hash_literal_string_keys_keep_source_order():
    expr = single_expression('{"one": 1, "two": 2, "three": 3}')
    assert isinstance(expr, HashLiteral)
    assert [(k.value, v.value) for k, v in expr.pairs] == [("one", 1), ("two", 2), ("three", 3)]


def test_empty_hash_literal():
    expr = single_expression("{}")
    assert isinstance(expr, HashLiteral)
    assert expr.pairs == []


def test_hash_literal_with_expression_values():
    expr = single_expression('{"one": 0 + 1, "two": 10 - 8, "three": 15 / 5}')
    ops = [(k.value, v.operator) for k, v in expr.pairs]
    assert ops == [("one", "+"), ("two", "-"), ("three", "/")]


def test_hash_literal_mixed_keys():
    expr = single_expression('{1: true, true: "x", "k": [1]}')
    assert isinstance(expr.pairs[0][0], IntegerLiteral)
    assert isinstance(expr.pairs[1][0], Boolean)
    assert isinstance(expr.pairs[2][1], ArrayLiteral)


# --- Errors ---

def test_let_without_identifier_reports_errors():
    _, errors = parse("let = 5;")
    assert errors[0] == "expected next token to be IDENT, got = instead"


def test_let_without_assign_reports_error():
    _, errors = parse("let x 5;")
    assert errors == ["expected next token to be =, got INT instead"]


def test_missing_prefix_function_is_reported():
    _, errors = parse("let x = ;")
    assert "no prefix parse function for ; found" in errors


def test_unclosed_group_is_reported():
    _, errors = parse("(1 + 2")
    assert errors == ["expected next token to be ), got EOF instead"]


def test_if_without_brace_is_reported():
    _, errors = parse("if (x) x")
    assert errors[0] == "expected next token to be {, got IDENT instead"


def test_illegal_token_has_no_prefix_function():
    _, errors = parse("@")
    assert errors == ["no prefix parse function for ILLEGAL found"]


def test_integer_out_of_range_is_reported():
    _, errors = parse("9223372036854775808")
    assert errors == ["could not parse 9223372036854775808 as integer"]


def test_max_int64_literal_parses():
    assert single_expression("9223372036854775807").value == 2 ** 63 - 1


def test_several_errors_are_collected_in_one_pass():
    _, errors = parse("let = 1; let y 2; (3")
    assert len(errors) >= 3


def test_parse_returns_partial_tree_on_error():
    program, errors = parse("let x = ; 5")
    assert errors
    assert program is not None


def test_function_parameters_must_be_identifiers():
    _, errors = parse("fn(1) {}")
    assert errors[0] == "expected next token to be IDENT, got INT instead"


def test_hash_literal_missing_colon_is_reported():
    _, errors = parse('{"a" 1}')
    assert errors[0] == "expected next token to be :, got INT instead"


def test_hash_literal_missing_colon_in_later_pair_is_reported():
    _, errors = parse('{"a": 1, "b" 2}')
    assert errors[0] == "expected next token to be :, got INT instead"


def test_hash_pairs_must_be_comma_separated():
    _, errors = parse('{"a": 1 "b": 2}')
    assert errors[0] == "expected next token to be }, got STRING instead"


def test_hash_pairs_share_the_list_parser():
    parser = Parser(Lexer('{"a": 1, "b": 2}'))
    pairs = parser.parse_expression_list(tokens.RBRACE, parser.parse_hash_pair)
    assert [(k.value, v.value) for k, v in pairs] == [("a", 1), ("b", 2)]
    assert parser.cur_token.type == tokens.RBRACE


# --- Parser mechanics ---

def test_parser_keeps_two_tokens_of_lookahead():
    parser = Parser(Lexer("let x"))
    assert parser.cur_token.literal == "let"
    assert parser.peek_token.literal == "x"
    parser.advance()
    assert parser.cur_token.literal == "x"
    assert parser.peek_token.type == "EOF"


def test_precedence_levels_increase():
    order = [Precedence.LOWEST, Precedence.EQUALS, Precedence.LESSGREATER, Precedence.SUM,
             Precedence.PRODUCT, Precedence.PREFIX, Precedence.CALL, Precedence.INDEX]
    assert order == sorted(order)
