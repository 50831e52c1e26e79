"""
Unit tests for the JavaScript grammar.
"""
import pytest
from lark import Lark
from lark.exceptions import UnexpectedCharacters, UnexpectedToken
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from jsbundle.grammar import js_grammar


@pytest.fixture
def parser():
    """Create a parser instance for testing."""
    return Lark(js_grammar, parser='lalr', lexer='contextual', propagate_positions=True, maybe_placeholders=True)


class TestStatementGrammar:
    """Tests for statement rules with explicit semicolons."""

    @pytest.mark.parametrize('code', [
        'var a = 1, b;',
        'if (a) b(); else { c(); }',
        'for (var i = 0; i < 10; i++) {}',
        'for (k in o) {}',
        'do { a(); } while (b);',
        'while (a) break;',
        'switch (a) { case 1: default: }',
        'try { a(); } catch (e) {} finally {}',
        'outer: for (;;) { continue outer; }',
        'with (o) {}',
        'throw new Error("x");',
        'debugger;',
        ';',
    ])
    def test_statement(self, parser, code):
        assert parser.parse(code) is not None

    def test_function_declaration(self, parser):
        """Function declarations need no trailing semicolon."""
        assert parser.parse('function f(a, b) { return a; } f(1, 2);') is not None


class TestExpressionGrammar:
    """Tests for expression rules."""

    @pytest.mark.parametrize('code', [
        'a = b ? c : d;',
        'a += b <<= 2;',
        'x = !a && -b || ~c;',
        'x = typeof a === "string";',
        'x = a instanceof B;',
        'x = a.b[c](d).e;',
        'x = new a.B(c);',
        'x = i++ + ++j;',
        'x = {a: 1, "b": 2, 3: 4, get c() { return 1; }, set c(v) {}};',
        'x = [1, , 2];',
        'x = /[/]+/gi;',
        'x = function () {};',
        'x = this;',
        'x = (a, b);',
    ])
    def test_expression(self, parser, code):
        assert parser.parse(code) is not None

    def test_missing_operand(self, parser):
        """A dangling operator is a syntax error."""
        with pytest.raises((UnexpectedToken, UnexpectedCharacters)):
            parser.parse('x = a + ;')

    def test_keywords_allowed_as_properties(self, parser):
        """Reserved words are valid after a dot and as object keys."""
        assert parser.parse('x = a.default + {new: 1}.new;') is not None

    def test_comments_are_ignored(self, parser):
        assert parser.parse('/* block */ a(); // line\n') is not None
