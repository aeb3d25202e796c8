"""
Тесты движка рендеринга и протокола отложенного выбора ветви.
"""

import asyncio

import pytest

from tmpl import EngineConfig, Environment
from tmpl.errors import EvaluationError
from tmpl.loader import DictLoader
from tmpl.template.base import TagPlugin
from tmpl.template.context import Scope
from tmpl.template.nodes import ROOT_HANDLE, TagNode, TagRole, TemplateTree, TextNode
from tmpl.template.processor import TemplateRenderer
from tmpl.template.types import Deferred, Resolved


class ChooseTag(TagPlugin):
    """START вычисляет селектор из сигнатуры; INSIDE-варианты сравнивают его со своей."""

    tag_names = ("choose",)
    inside_tag_names = ("option",)

    @property
    def name(self) -> str:
        return "choose"

    async def render(self, node, scope, env, children):
        if node.role is TagRole.START:
            return await children(scope, node.signature)

        async def pick(selector):
            return await children(scope) if selector == node.signature else ""

        return Deferred(pick)


class SyncPickTag(TagPlugin):
    tag_names = ("sync",)

    @property
    def name(self) -> str:
        return "sync"

    async def render(self, node, scope, env, children):
        return Deferred(lambda selector: f"<{selector}>")


class SleepTag(TagPlugin):
    """Одиночный тег, завершающийся через заданное число миллисекунд."""

    tag_names = ("sleep",)
    singular = True

    @property
    def name(self) -> str:
        return "sleep"

    def parse_args(self, tag_name, role, signature):
        return int(signature)

    async def render(self, node, scope, env, children):
        await asyncio.sleep(node.args / 1000)
        return Resolved(str(node.args))


class BrokenTag(TagPlugin):
    tag_names = ("broken",)
    singular = True

    @property
    def name(self) -> str:
        return "broken"

    async def render(self, node, scope, env, children):
        raise RuntimeError("boom")


def make_env(**config) -> Environment:
    env = Environment(loader=DictLoader({}), config=EngineConfig(**config))
    for plugin in (ChooseTag(), SyncPickTag(), SleepTag(), BrokenTag()):
        env.add_tag(plugin)
    return env


def choose_tree(env: Environment, selector: str) -> TemplateTree:
    """
    Дерево со START-узлом и двумя INSIDE-детьми-соседями,
    связанными с селекторами "if" и "else" (в обратном порядке).
    """
    plugin = env.registry.get("choose").plugin
    tree = TemplateTree("manual")
    start = tree.append(ROOT_HANDLE, TagNode("choose", TagRole.START, selector, "choose", plugin))
    for bound in ("else", "if"):
        option = tree.append(start, TagNode("option", TagRole.INSIDE, bound, "choose", plugin))
        tree.append(option, TextNode(f"{bound}-body"))
    return tree


class TestRenderEngine:

    def test_literal_text_unchanged(self):
        env = make_env()
        text = "Line 1\n  Line 2 with {braces} and % signs\n"

        assert asyncio.run(env.render_string(text)) == text

    def test_selector_picks_else_child_regardless_of_order(self):
        env = make_env()
        tree = choose_tree(env, "else")
        renderer = TemplateRenderer(tree, env)

        assert asyncio.run(renderer.render(Scope())) == "else-body"

    def test_selector_picks_if_child(self):
        env = make_env()
        renderer = TemplateRenderer(choose_tree(env, "if"), env)

        assert asyncio.run(renderer.render(Scope())) == "if-body"

    def test_root_receives_absent_selector(self):
        env = make_env()

        assert asyncio.run(env.render_string("{% sync %}{% endsync %}")) == "<None>"

    def test_sync_pick_function_supported(self):
        env = make_env()
        tree = env.parse("{% choose x %}{% option x %}{% sync %}{% endsync %}{% endchoose %}")

        assert asyncio.run(TemplateRenderer(tree, env).render(Scope())) == "<None>"

    @pytest.mark.parametrize("parallel", [False, True])
    def test_document_order_independent_of_completion(self, parallel):
        """Порядок склейки — порядок документа, а не порядок завершения"""
        env = make_env(parallel_children=parallel)
        source = "{% sleep 30 %}-{% sleep 1 %}-{% sleep 15 %}"

        assert asyncio.run(env.render_string(source)) == "30-1-15"

    def test_parallel_children_run_concurrently(self):
        env = make_env(parallel_children=True)
        source = "".join("{% sleep 50 %}" for _ in range(10))

        async def timed():
            loop = asyncio.get_running_loop()
            started = loop.time()
            text = await env.render_string(source)
            return text, loop.time() - started

        text, elapsed = asyncio.run(timed())
        assert text == "50" * 10
        assert elapsed < 0.4

    def test_tag_exception_wrapped_with_location(self):
        env = make_env()

        with pytest.raises(EvaluationError, match=r"\[page:2\] Error rendering \{% broken %\}: boom"):
            asyncio.run(env.render_string("ok\n{% broken %}", template_name="page"))

    def test_expression_error_aborts_render(self):
        env = make_env()

        with pytest.raises(EvaluationError, match=r"\[\(string\):1\] 'missing' is undefined"):
            asyncio.run(env.render_string("a {{ missing }} b"))

    def test_expression_parsed_lazily_and_memoised(self):
        env = make_env()
        tree = env.parse("{{ 1 + 2 }}")
        node = tree.children(ROOT_HANDLE)[0]
        renderer = TemplateRenderer(tree, env)
        scope = env._make_scope({})

        assert node.expression is None
        assert asyncio.run(renderer.render(scope)) == "3"
        first = node.expression
        assert asyncio.run(renderer.render(scope)) == "3"
        assert node.expression is first

    def test_expression_syntax_error_reported_as_evaluation_error(self):
        env = make_env()

        with pytest.raises(EvaluationError, match="Parse error"):
            asyncio.run(env.render_string("{{ 1 + }}"))

    def test_bad_render_result_type(self):
        class NumberTag(TagPlugin):
            tag_names = ("number",)
            singular = True

            @property
            def name(self):
                return "number"

            async def render(self, node, scope, env, children):
                return 42

        env = make_env()
        env.add_tag(NumberTag())

        with pytest.raises(EvaluationError, match="returned int"):
            asyncio.run(env.render_string("{% number %}"))

    def test_parallel_failure_cancels_running_siblings(self):
        events = []

        class SlowTag(TagPlugin):
            tag_names = ("slow",)
            singular = True

            @property
            def name(self):
                return "slow"

            async def render(self, node, scope, env, children):
                try:
                    await asyncio.sleep(0.2)
                except asyncio.CancelledError:
                    events.append("cancelled")
                    raise
                events.append("finished")
                return "slow"

        env = make_env(parallel_children=True)
        env.add_tag(SlowTag())

        async def scenario():
            with pytest.raises(EvaluationError, match="boom"):
                await env.render_string("{% slow %}{% broken %}{% slow %}")
            await asyncio.sleep(0.3)

        asyncio.run(scenario())
        assert events and "finished" not in events

    @pytest.mark.parametrize("parallel", [False, True])
    def test_expression_runtime_failures_become_evaluation_errors(self, parallel):
        class Record:
            @property
            def value(self):
                raise ValueError("bad property")

        env = make_env(parallel_children=parallel)

        with pytest.raises(EvaluationError, match=r"\[\(string\):1\] Invalid dictionary key"):
            asyncio.run(env.render_string("{{ {[1]: 2} }}"))
        with pytest.raises(EvaluationError, match=r"\[\(string\):2\] .*bad property"):
            asyncio.run(env.render_string("x\n{{ obj.value }}", {"obj": Record()}))
