"""
Тесты лексера шаблонов.
"""

import pytest

from tmpl.template.lexer import TemplateLexer, tokenize_template
from tmpl.template.tokens import TokenType, delimiter_type


class TestTemplateLexer:

    def test_plain_text_single_token(self):
        """Текст без разделителей — один TEXT-токен"""
        tokens = tokenize_template("Hello, world")

        assert len(tokens) == 1
        assert tokens[0].type is TokenType.TEXT
        assert tokens[0].value == "Hello, world"
        assert tokens[0].line == 1

    def test_empty_template(self):
        assert tokenize_template("") == []

    def test_delimiters_preserved_in_order(self):
        tokens = tokenize_template("a{{ x }}b{% if y %}c{# note #}")

        assert [t.type for t in tokens] == [
            TokenType.TEXT,
            TokenType.EXPR_START, TokenType.TEXT, TokenType.EXPR_END,
            TokenType.TEXT,
            TokenType.TAG_START, TokenType.TEXT, TokenType.TAG_END,
            TokenType.TEXT,
            TokenType.COMMENT_START, TokenType.TEXT, TokenType.COMMENT_END,
        ]
        assert "".join(t.value for t in tokens) == "a{{ x }}b{% if y %}c{# note #}"

    def test_adjacent_delimiters_no_empty_text(self):
        tokens = tokenize_template("{{x}}{{y}}")

        assert [t.value for t in tokens] == ["{{", "x", "}}", "{{", "y", "}}"]

    def test_line_numbers_track_newlines(self):
        """Номер строки — строка, на которой начинается токен"""
        tokens = tokenize_template("line1\nline2\n{{ x }}\n\n{% end %}")

        by_value = {t.value: t.line for t in tokens if t.type is not TokenType.TEXT}
        assert tokens[0].line == 1
        assert by_value["{{"] == 3
        assert by_value["{%"] == 5

    def test_stream_is_not_restartable(self):
        lexer = TemplateLexer("a{{b}}", "page")
        assert len(list(lexer)) == 4

        with pytest.raises(RuntimeError, match="already consumed"):
            list(lexer)

    def test_delimiter_type_lookup(self):
        assert delimiter_type("{%") is TokenType.TAG_START
        assert delimiter_type("#}") is TokenType.COMMENT_END
        assert delimiter_type("{x") is TokenType.TEXT
        assert TokenType.EXPR_END.is_delimiter
        assert not TokenType.TEXT.is_delimiter
