"""
Unit tests for the code printer.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from jsbundle import nodes as js
from jsbundle.config import OutputOptions
from jsbundle.parser import parse
from jsbundle.printer import InlineDefinitions, format_number, make_string, print_to_string
from jsbundle.scope import figure_out_scope


def reprint(source, options=None, definitions_layout=None):
    return print_to_string(figure_out_scope(parse(source)), options, definitions_layout)


class TestDefinitions:
    """Tests for var statement layout."""

    def test_each_var_on_a_new_line(self):
        """Declarators are stacked one per line."""
        assert reprint('var a = 1, b = 2, c = 3;') == 'var a = 1,\n    b = 2,\n    c = 3;'

    def test_vars_in_for_stay_on_one_line(self):
        """Declarators in a for header stay on the header line."""
        assert reprint('for (var i = 0, j = 0; ;) {}') == 'for (var i = 0, j = 0; ;) {}'

    def test_inline_layout(self):
        """The inline layout keeps every declarator on one line."""
        assert reprint('var a = 1, b = 2;', definitions_layout=InlineDefinitions()) == 'var a = 1, b = 2;'

    def test_one_var_per_line_option(self):
        """Turning one_var_per_line off selects the inline layout."""
        options = OutputOptions(one_var_per_line=False)
        assert reprint('var a = 1, b = 2;', options) == 'var a = 1, b = 2;'

    def test_nested_stacking(self):
        """Continuation lines are indented relative to the declaration."""
        code = reprint('function f() { var a = 1, b = 2; }')
        assert code == 'function f() {\n    var a = 1,\n        b = 2;\n}'

    def test_nested_bodies_follow_declarator_column(self):
        """Function and object bodies in stacked declarators line up with their declarator."""
        code = reprint('var a = 1, b = function(){ x(); }, c = {k: 1};')
        assert code == (
            'var a = 1,\n'
            '    b = function() {\n'
            '        x();\n'
            '    },\n'
            '    c = {\n'
            '        k: 1\n'
            '    };'
        )

    def test_single_declarator_body(self):
        """A lone declarator keeps its body at the statement's indentation."""
        assert reprint('var f = function(){ x(); };') == 'var f = function() {\n    x();\n};'


class TestStatements:
    """Tests for statement printing."""

    def test_toplevel_statements_are_separated(self):
        """Top-level statements are separated by a blank line."""
        assert reprint('a(); b();') == 'a();\n\nb();'

    def test_bracketize(self):
        """Single-statement bodies get braces."""
        assert reprint('if (a) b();') == 'if (a) {\n    b();\n}'

    def test_if_else(self):
        """Both branches of an if are braced."""
        assert reprint('if (a) b(); else c();') == 'if (a) {\n    b();\n} else {\n    c();\n}'

    def test_else_if_chain(self):
        """else if is not wrapped in a block."""
        code = reprint('if (a) b(); else if (c) d();')
        assert code == 'if (a) {\n    b();\n} else if (c) {\n    d();\n}'

    def test_without_bracketize(self):
        """Without bracketize a single statement stays bare."""
        options = OutputOptions(bracketize=False)
        assert reprint('while (a) b();', options) == 'while (a) b();'

    def test_switch_half_indent(self):
        """Case labels sit half an indent left of their statements."""
        code = reprint('switch (x) { case 1: a(); break; default: b(); }')
        assert code == 'switch (x) {\n  case 1:\n    a();\n    break;\n\n  default:\n    b();\n}'

    def test_empty_function(self):
        """An empty body prints as {}."""
        assert reprint('function f() {}') == 'function f() {}'


class TestParentheses:
    """Tests for parenthesisation."""

    def test_precedence_parens(self):
        """A lower-precedence operand is parenthesised."""
        assert reprint('(a + b) * c;') == '(a + b) * c;'

    def test_redundant_parens_dropped(self):
        """Parentheses that precedence implies are not printed."""
        assert reprint('a + (b * c);') == 'a + b * c;'

    def test_right_operand_of_same_precedence(self):
        """a - (b - c) keeps its parentheses."""
        assert reprint('a - (b - c);') == 'a - (b - c);'

    def test_function_at_statement_start(self):
        """A function expression at the start of a statement is wrapped."""
        assert reprint('(function () {})();') == '(function() {})();'

    def test_object_at_statement_start(self):
        """An object literal at the start of a statement is wrapped."""
        assert reprint('({}).toString();') == '({}).toString();'

    def test_number_property_access(self):
        """A number before a dot is wrapped."""
        assert reprint('(1).toString();') == '(1).toString();'

    def test_sequence_in_arguments(self):
        """A sequence passed as an argument keeps its parentheses."""
        assert reprint('f((a, b));') == 'f((a, b));'

    def test_new_with_call_callee(self):
        """new (a())() keeps the call inside the callee."""
        assert reprint('new (a())();') == 'new (a())();'

    def test_in_inside_for_init(self):
        """An in expression inside a for initialiser is wrapped."""
        assert reprint('for (var a = (b in c); ;) {}') == 'for (var a = (b in c); ;) {}'


class TestLiterals:
    """Tests for literal printing."""

    def test_quote_choice(self):
        """Double quotes are used unless the value has more of them."""
        assert make_string('abc') == '"abc"'
        assert make_string('say "hi"') == "'say \"hi\"'"
        assert make_string("it's") == '"it\'s"'

    def test_ascii_only(self):
        """Non-ASCII characters are escaped."""
        assert make_string('é中') == '"\\xe9\\u4e2d"'

    def test_control_characters(self):
        """Control characters use their short escapes."""
        assert make_string('a\nb\tc') == '"a\\nb\\tc"'

    def test_numbers(self):
        """Whole floats print as integers."""
        assert format_number(1000.0) == '1000'
        assert format_number(1.5) == '1.5'
        assert format_number(1e21) == '1e21'

    def test_object_keys(self):
        """Keys that are not identifiers are quoted."""
        assert reprint('x = {a: 1, "b c": 2};') == 'x = {\n    a: 1,\n    "b c": 2\n};'

    def test_array(self):
        """Arrays print with inner spaces."""
        assert reprint('x = [1, 2];') == 'x = [ 1, 2 ];'

    def test_renamed_symbol(self):
        """A definition's display name replaces the source name everywhere."""
        tree = figure_out_scope(parse('function f(a) { return a; }'))
        argname = tree.body[0].argnames[0]
        argname.thedef.mangled_name = 'value'
        assert print_to_string(tree) == 'function f(value) {\n    return value;\n}'

    def test_word_operator_spacing(self):
        """Word operators are separated from their operand."""
        assert reprint('typeof a;') == 'typeof a;'
        assert reprint('a - -b;') == 'a - -b;'

    @pytest.mark.parametrize('source', ['x = NaN;', 'x = true;', 'x = null;', 'x = this;'])
    def test_atoms(self, source):
        """Atoms print as written."""
        assert reprint(source) == source

    def test_constructed_atoms(self):
        """Atoms built by hand print by name."""
        statement = js.SimpleStatement(body=js.Sequence(expressions=[js.NaN(), js.Infinity(), js.Boolean(value=False)]))
        assert print_to_string(js.Toplevel(body=[statement])) == 'NaN, Infinity, false;'
