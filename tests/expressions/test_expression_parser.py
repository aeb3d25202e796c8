"""
Tests for the expression parser.
"""

import pytest

from tmpl.expressions.errors import ExpressionSyntaxError
from tmpl.expressions.model import (
    Attribute,
    Binary,
    Call,
    Compare,
    Conditional,
    DictExpr,
    ExprType,
    Filter,
    ListExpr,
    Literal,
    Logical,
    Name,
    Not,
    Subscript,
    Unary,
)
from tmpl.expressions.parser import ExpressionParser, parse_expression


class TestExpressionParser:

    def setup_method(self):
        self.parser = ExpressionParser()

    def test_empty_expression_error(self):
        with pytest.raises(ExpressionSyntaxError, match="Empty expression"):
            self.parser.parse("")

        with pytest.raises(ExpressionSyntaxError, match="Empty expression"):
            self.parser.parse("   ")

    def test_literals(self):
        assert self.parser.parse("42") == Literal(42)
        assert self.parser.parse("2.5") == Literal(2.5)
        assert self.parser.parse("'hi'") == Literal("hi")
        assert self.parser.parse("true") == Literal(True)
        assert self.parser.parse("null") == Literal(None)
        assert self.parser.parse("none") == Literal(None)

    def test_precedence_arithmetic(self):
        """Test multiplication binds tighter than addition"""
        result = self.parser.parse("1 + 2 * 3")

        assert isinstance(result, Binary)
        assert result.operator == "+"
        assert isinstance(result.right, Binary)
        assert result.right.operator == "*"

    def test_left_associativity(self):
        result = self.parser.parse("8 - 2 - 1")

        assert str(result) == "((8 - 2) - 1)"

    def test_logical_and_not(self):
        result = self.parser.parse("not a and b or c")

        assert isinstance(result, Logical)
        assert result.operator == "or"
        assert isinstance(result.left, Logical)
        assert isinstance(result.left.left, Not)

    def test_symbolic_logical_operators(self):
        assert self.parser.parse("a && b || !c") == self.parser.parse("a and b or not c")

    def test_comparisons(self):
        result = self.parser.parse("a not in b")

        assert isinstance(result, Compare)
        assert result.operator == "not in"
        assert self.parser.parse("x >= 1").operator == ">="
        assert self.parser.parse("'a' in xs").operator == "in"

    def test_postfix_chain(self):
        result = self.parser.parse("user.items[0].name(1, 2)")

        assert isinstance(result, Call)
        assert len(result.args) == 2
        assert isinstance(result.func, Attribute)
        assert isinstance(result.func.target, Subscript)
        assert isinstance(result.func.target.target, Attribute)
        assert result.func.target.target.target == Name("user")

    def test_unary(self):
        assert self.parser.parse("-x") == Unary("-", Name("x"))
        assert self.parser.parse("--1") == Unary("-", Unary("-", Literal(1)))

    def test_conditional_expression(self):
        result = self.parser.parse("a if cond else b")

        assert isinstance(result, Conditional)
        assert result.condition == Name("cond")

    def test_conditional_requires_else(self):
        with pytest.raises(ExpressionSyntaxError, match="Expected 'else'"):
            self.parser.parse("a if cond")

    def test_collections(self):
        assert self.parser.parse("[1, 2,]") == ListExpr([Literal(1), Literal(2)])
        assert self.parser.parse("[]") == ListExpr([])
        result = self.parser.parse("{'a': 1, b: x | f}")
        assert isinstance(result, DictExpr)
        assert result.items[0] == (Literal("a"), Literal(1))
        assert isinstance(result.items[1][1], Filter)

    def test_filter_without_args(self):
        result = self.parser.parse("name | upper")

        assert result == Filter(Name("name"), "upper", [])
        assert result.get_type() == ExprType.FILTER

    def test_filter_chain_is_left_associative(self):
        """x | double | addN: 1 == ((x | double) | addN: 1)"""
        result = self.parser.parse("x | double | addN: 1")

        assert isinstance(result, Filter)
        assert result.name == "addN"
        assert result.args == [Literal(1)]
        assert result.value == Filter(Name("x"), "double", [])

    def test_filter_arguments(self):
        result = self.parser.parse("s | replace: 'a' ~ 'b', x if y else z")

        assert len(result.args) == 2
        assert isinstance(result.args[0], Binary)
        assert isinstance(result.args[1], Conditional)

    def test_filter_binds_loosest(self):
        result = self.parser.parse("a + b | f")

        assert isinstance(result, Filter)
        assert isinstance(result.value, Binary)

    def test_grouped_filter(self):
        result = self.parser.parse("(a | f) + 1")

        assert isinstance(result, Binary)
        assert isinstance(result.left, Filter)

    @pytest.mark.parametrize("source, message", [
        ("1 +", "Unexpected end of expression"),
        ("(1", r"Expected '\)'"),
        ("a b", "Unexpected token 'b'"),
        ("x |", "Expected filter name"),
        ("x | 1", "Expected filter name"),
        ("a.", "Expected attribute name"),
        ("{1 2}", "Expected ':'"),
    ])
    def test_syntax_errors(self, source, message):
        with pytest.raises(ExpressionSyntaxError, match=message):
            parse_expression(source)
