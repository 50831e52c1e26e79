"""
Unit tests for the parse tree transformer helpers.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from lark import Token
from jsbundle import nodes as js
from jsbundle.errors import JSSyntaxError
from jsbundle.parser import parse
from jsbundle.transformer import decode_string, fold_binary, parse_number


def ref(name):
    return js.SymbolRef(name=name)


class TestDecodeString:
    """Tests for decode_string()."""

    @pytest.mark.parametrize('literal, value', [
        (r'"plain"', 'plain'),
        (r"'single'", 'single'),
        (r'"A\x42"', 'AB'),
        (r'"\u{1F600}"', '\U0001F600'),
        (r'"😀"', '\U0001F600'),
        (r'"\101"', 'A'),
        (r'"\0"', '\0'),
        (r'"a\
b"', 'ab'),
        (r'"\q"', 'q'),
    ])
    def test_escapes(self, literal, value):
        assert decode_string(Token('STRING', literal)) == value


class TestParseNumber:
    """Tests for parse_number()."""

    def test_integer_forms(self):
        assert parse_number('0') == 0
        assert parse_number('0xff') == 255
        assert parse_number('0XFF') == 255

    def test_float_forms(self):
        assert parse_number('.5') == 0.5
        assert parse_number('2e-3') == 0.002


class TestFoldBinary:
    """Tests for fold_binary()."""

    def test_single_operand(self):
        a = ref('a')
        assert fold_binary([a], []) is a

    def test_mixed_precedence(self):
        """a || b && c == d groups as a || (b && (c == d))."""
        tree = fold_binary([ref('a'), ref('b'), ref('c'), ref('d')], ['||', '&&', '=='])
        assert tree.operator == '||'
        assert tree.right.operator == '&&'
        assert tree.right.right.operator == '=='

    def test_left_grouping(self):
        """a * b + c groups as (a * b) + c."""
        tree = fold_binary([ref('a'), ref('b'), ref('c')], ['*', '+'])
        assert tree.operator == '+'
        assert tree.left.operator == '*'


class TestTransformErrors:
    """Tests for errors raised while building the tree."""

    def test_invalid_for_header(self):
        """A for header with one clause that is not an in test is rejected."""
        with pytest.raises(JSSyntaxError):
            parse('for (a) {}')
