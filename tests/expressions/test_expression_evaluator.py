"""
Тесты асинхронного вычислителя выражений.
"""

import asyncio
from types import SimpleNamespace

import pytest

from tmpl.expressions import (
    EvaluationError,
    ExpressionEvaluator,
    UndefinedPolicy,
    evaluate_expression,
    parse_expression,
    stringify,
)
from tmpl.template.context import FILTERS_KEY, Scope


async def _fetch(value):
    await asyncio.sleep(0)
    return value * 10


def make_scope(**bindings) -> Scope:
    filters = {
        "double": lambda v: v * 2,
        "addN": lambda v, n: v + n,
        "wrap": lambda v, left="[", right="]": f"{left}{v}{right}",
        "fetch": _fetch,
        "explode": lambda v: 1 / 0,
    }
    functions = {"fetch": _fetch, "pair": lambda a, b: (a, b)}
    globals_scope = Scope({**functions, FILTERS_KEY: filters})
    return globals_scope.child(bindings)


def ev(source, scope=None, undefined=UndefinedPolicy.STRICT):
    return asyncio.run(evaluate_expression(parse_expression(source), scope or make_scope(), undefined))


class TestExpressionEvaluator:

    def test_filter_chain(self):
        """x | double | addN: 1 при x = 3 даёт 7"""
        assert ev("x | double | addN: 1", make_scope(x=3)) == 7

    def test_filter_multiple_arguments(self):
        assert ev("v | wrap: '<', '>'", make_scope(v="a")) == "<a>"
        assert ev("v | wrap", make_scope(v="a")) == "[a]"

    def test_async_filter_and_function_awaited(self):
        assert ev("2 | fetch", make_scope()) == 20
        assert ev("fetch(3) + 1", make_scope()) == 31

    def test_unknown_filter(self):
        with pytest.raises(EvaluationError, match="Unknown filter 'nope'"):
            ev("1 | nope")

    def test_filter_failure_wrapped(self):
        with pytest.raises(EvaluationError, match="Error in filter 'explode'"):
            ev("1 | explode")

    def test_arithmetic_and_concat(self):
        assert ev("1 + 2 * 3 - 4 / 2") == 5.0
        assert ev("7 // 2 + 7 % 2") == 4
        assert ev("'a' ~ 1 ~ none") == "a1"
        assert ev("-x + +1", make_scope(x=5)) == -4

    def test_type_mismatch(self):
        with pytest.raises(EvaluationError, match="Cannot evaluate"):
            ev("'a' - 1")

    def test_division_by_zero(self):
        with pytest.raises(EvaluationError):
            ev("1 / 0")

    def test_logical_short_circuit_returns_operand(self):
        assert ev("0 or 'fallback'") == "fallback"
        assert ev("'' and missing") == ""
        assert ev("1 and 2") == 2
        assert ev("not 0") is True

    def test_comparisons(self):
        assert ev("1 < 2 and 2 >= 2 and 1 != 2")
        assert ev("'b' in ['a', 'b']") is True
        assert ev("'z' not in 'abc'") is True

    def test_conditional(self):
        assert ev("'yes' if flag else 'no'", make_scope(flag=True)) == "yes"
        assert ev("'yes' if flag else 'no'", make_scope(flag=False)) == "no"

    def test_member_access_mapping_and_object(self):
        scope = make_scope(user={"name": "ann", "tags": ["x", "y"]}, obj=SimpleNamespace(size=3))

        assert ev("user.name", scope) == "ann"
        assert ev("user['tags'][1]", scope) == "y"
        assert ev("obj.size", scope) == 3
        with pytest.raises(EvaluationError, match="Attribute 'keys' of dict is undefined"):
            ev("user.keys", scope)

    def test_collections(self):
        assert ev("[1, x, 'z']", make_scope(x=2)) == [1, 2, "z"]
        assert ev("{'a': 1, 'b': x}", make_scope(x=2)) == {"a": 1, "b": 2}

    def test_unhashable_dict_key(self):
        with pytest.raises(EvaluationError, match="Invalid dictionary key"):
            ev("{[1]: 2}")

    def test_raising_property_wrapped(self):
        class Broken:
            @property
            def value(self):
                raise ValueError("bad property")

        with pytest.raises(EvaluationError, match="Error reading attribute 'value' of Broken: bad property"):
            ev("obj.value", make_scope(obj=Broken()))

    def test_raising_getitem_wrapped(self):
        class Table:
            def __getitem__(self, key):
                raise RuntimeError("backend down")

        with pytest.raises(EvaluationError, match="Error reading item 'k' of Table"):
            ev("t['k']", make_scope(t=Table()))

    def test_function_call(self):
        assert ev("pair(1, 2)") == (1, 2)

    def test_not_callable(self):
        with pytest.raises(EvaluationError, match="is not callable"):
            ev("x(1)", make_scope(x=5))

    def test_scope_chain_lookup(self):
        outer = make_scope(a=1, b=2)
        inner = outer.child({"b": 20})

        assert ev("a + b", inner) == 21
        assert ev("a + b", outer) == 3


class TestUndefinedPolicy:

    def test_strict_undefined_name(self):
        with pytest.raises(EvaluationError, match="'missing' is undefined"):
            ev("missing")

    def test_strict_missing_attribute(self):
        with pytest.raises(EvaluationError, match="Attribute 'nope' of dict is undefined"):
            ev("d.nope", make_scope(d={}))

    def test_strict_missing_item(self):
        with pytest.raises(EvaluationError, match="is undefined"):
            ev("xs[5]", make_scope(xs=[1]))

    def test_lenient_yields_none(self):
        lenient = UndefinedPolicy.LENIENT

        assert ev("missing", undefined=lenient) is None
        assert ev("missing.deep[0].name", undefined=lenient) is None
        assert ev("d.nope", make_scope(d={}), undefined=lenient) is None

    def test_lenient_still_fails_on_unknown_filter(self):
        with pytest.raises(EvaluationError, match="Unknown filter"):
            ev("missing | nope", undefined=UndefinedPolicy.LENIENT)

    def test_policy_parse(self):
        assert UndefinedPolicy.parse("Lenient") is UndefinedPolicy.LENIENT
        assert UndefinedPolicy.parse(UndefinedPolicy.STRICT) is UndefinedPolicy.STRICT
        with pytest.raises(ValueError, match="Invalid undefined policy"):
            UndefinedPolicy.parse("loose")

    def test_evaluator_keeps_scope(self):
        scope = make_scope(x=1)
        evaluator = ExpressionEvaluator(scope, UndefinedPolicy.LENIENT)

        assert evaluator.scope is scope
        assert asyncio.run(evaluator.evaluate_text(parse_expression("missing"))) == ""


class TestStringify:

    @pytest.mark.parametrize("value, expected", [
        (None, ""),
        ("text", "text"),
        (7, "7"),
        (2.5, "2.5"),
        (True, "true"),
        (False, "false"),
        ([1, 2], "[1, 2]"),
    ])
    def test_stringify(self, value, expected):
        assert stringify(value) == expected
