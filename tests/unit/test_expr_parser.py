import pytest

from phasefield.dsl.expr import BinOp, Call, Neg, Num, Var, parse, tokenize
from phasefield.errors import ExpressionParseError


def test_tokenize_runs_and_positions():
    toks = tokenize("  sin(x) + 2.5*y")
    assert [t.text for t in toks] == ["sin", "(", "x", ")", "+", "2.5", "*", "y"]
    assert [t.kind for t in toks][:3] == ["ident", "op", "ident"]
    # offsets refer to the caller's text, leading blanks included
    assert toks[0].pos == 2
    assert toks[5].pos == 11


def test_trailing_semicolon_and_whitespace_ignored():
    expr = parse("  x + y ;")
    assert expr.source == "x + y"
    assert expr.root == BinOp("+", Var("x"), Var("y"))


def test_precedence_and_left_associativity():
    expr = parse("x - y - 1 * a / b")
    assert expr.root == BinOp(
        "-",
        BinOp("-", Var("x"), Var("y")),
        BinOp("/", BinOp("*", Num(1.0), Var("a")), Var("b")),
    )


def test_power_is_right_associative():
    expr = parse("x^2^3")
    assert expr.root == BinOp("^", Var("x"), BinOp("^", Num(2.0), Num(3.0)))


def test_unary_minus_binds_looser_than_power():
    assert parse("-x^2").root == Neg(BinOp("^", Var("x"), Num(2.0)))
    assert parse("2*-y").root == BinOp("*", Num(2.0), Neg(Var("y")))


def test_function_call_then_power():
    # sin(x)^2 squares the sine
    assert parse("sin(x)^2").root == BinOp("^", Call("sin", Var("x")), Num(2.0))


def test_all_functions_accepted():
    for fn in ("sin", "cos", "tan", "exp", "sqrt"):
        assert parse(f"{fn}(x + 1)").root == Call(fn, BinOp("+", Var("x"), Num(1.0)))


def test_names_collects_variables():
    assert parse("a*x - b*x*y").names() == frozenset({"a", "b", "x", "y"})
    assert parse("3.0 + 1").names() == frozenset()


def test_leading_dot_number():
    assert parse(".5*x").root == BinOp("*", Num(0.5), Var("x"))


def test_reparse_is_equal():
    assert parse("a*(1 - x^2)*y - x") == parse("a*(1 - x^2)*y - x")


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("x + ", "unexpected end of expression"),
        ("(x + y", "is never closed"),
        ("x + y)", "Mismatched parentheses, unexpected ')'"),
        ("", "Empty expression"),
        ("   ;", "Empty expression"),
        ("foo(x)", "Unknown identifier: 'foo'"),
        ("sin x", "Expected '(' after function 'sin'"),
        ("x y", "Unexpected token: 'y'"),
        ("1.2.3", "Malformed number '1.2.3'"),
        ("x # 2", "Unexpected character '#'"),
        ("* x", "Unexpected token: '*'"),
    ],
)
def test_parse_errors_are_descriptive(text, fragment):
    with pytest.raises(ExpressionParseError) as exc_info:
        parse(text)
    assert fragment in str(exc_info.value)


def test_parse_error_carries_token_and_position():
    with pytest.raises(ExpressionParseError) as exc_info:
        parse("x + qq")
    err = exc_info.value
    assert err.token == "qq"
    assert err.position == 4
    assert err.text == "x + qq"
    # caret line points at the token
    lines = str(err).splitlines()
    assert lines[-2].endswith("x + qq")
    assert lines[-1].index("^") == lines[-2].index("qq")


def test_non_string_rejected():
    with pytest.raises(ExpressionParseError, match="must be a string"):
        parse(3.0)
