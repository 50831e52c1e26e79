"""
Syntax tree to source text.

``CodePrinter`` walks a tree and writes into an ``OutputStream``; one
``_print_<NodeClass>`` method per node type. Parentheses are added only
where precedence or statement-start ambiguity needs them, following the
rules UglifyJS uses.

Declaration lists are laid out by a strategy object so callers can choose
between one declarator per line and everything on one line.
"""
import math
import re

from . import nodes as js
from .config import OutputOptions
from .nodes import PRECEDENCE

_IDENTIFIER_CHAR = re.compile(r'[\w$\\]')
_STRING_ESCAPES = re.compile('[\\\b\f\n\r\v\t"\'\u2028\u2029\0\ufeff]')
_NON_ASCII = re.compile('[\u0000-\u001f\u007f-\U0010ffff]')
_WORD_OPERATORS = {'in', 'instanceof', 'typeof', 'void', 'delete'}


def format_number(value):
    """JavaScript source text for a numeric value."""
    if isinstance(value, float):
        if math.isnan(value):
            return 'NaN'
        if math.isinf(value):
            return 'Infinity' if value > 0 else '-Infinity'
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        text = repr(value)
        text = text.replace('e+', 'e')
        return re.sub(r'e(-?)0+(\d)', r'e\1\2', text)
    return str(value)


def to_ascii(text, identifier=False):
    """Escape control and non-ASCII characters; identifiers only allow the \\u form."""
    def escape(match):
        code = ord(match.group())
        if code <= 0xff and not identifier:
            return f"\\x{code:02x}"
        if code <= 0xffff:
            return f"\\u{code:04x}"
        code -= 0x10000
        return f"\\u{0xd800 + (code >> 10):04x}\\u{0xdc00 + (code & 0x3ff):04x}"
    return _NON_ASCII.sub(escape, text)


def make_string(value, ascii_only=True):
    """Quote a string value, choosing the quote that needs fewer escapes."""
    counts = {'"': 0, "'": 0}

    def escape(match):
        ch = match.group()
        if ch in counts:
            counts[ch] += 1
            return ch
        if ch == '\0':
            following = value[match.end():match.end() + 1]
            return "\\x00" if following.isdigit() else "\\0"
        return {
            '\\': '\\\\', '\n': '\\n', '\r': '\\r', '\t': '\\t', '\b': '\\b',
            '\f': '\\f', '\v': '\\v', '\u2028': '\\u2028', '\u2029': '\\u2029',
            '\ufeff': '\\ufeff',
        }[ch]

    text = _STRING_ESCAPES.sub(escape, value)
    if ascii_only:
        text = to_ascii(text)
    if counts['"'] > counts["'"]:
        return "'" + text.replace("'", "\\'") + "'"
    return '"' + text.replace('"', '\\"') + '"'


class OutputStream:
    """Accumulates printed text and tracks indentation."""

    def __init__(self, options):
        self.options = options
        self._parts = []
        self._last = ''
        self.indentation = 0

    def print(self, text):
        if not text:
            return
        last = self._last[-1:]
        first = text[0]
        # Keep words, and doubled signs like "a - -b", apart
        if last and (
            (_IDENTIFIER_CHAR.match(last) and _IDENTIFIER_CHAR.match(first))
            or (last in '+-' and first == last)
            or (last == '/' and first == '/')
        ):
            self._parts.append(' ')
        self._parts.append(text)
        self._last = text

    def space(self):
        if self.options.beautify:
            self.print(' ')

    def indent(self, half=False):
        if self.options.beautify:
            column = self.indentation - self.options.indent_level // 2 if half else self.indentation
            self.print(' ' * column)

    def newline(self):
        if self.options.beautify:
            self.print('\n')

    def semicolon(self):
        self.print(';')

    def comma(self):
        self.print(',')
        self.space()

    def colon(self):
        self.print(':')
        self.space()

    def next_indent(self):
        return self.indentation + self.options.indent_level

    def with_indent(self, column, fn):
        saved = self.indentation
        self.indentation = column
        try:
            fn()
        finally:
            self.indentation = saved

    def with_block(self, fn):
        self.print('{')
        self.newline()
        self.with_indent(self.next_indent(), fn)
        self.indent()
        self.print('}')

    def with_parens(self, fn):
        self.print('(')
        fn()
        self.print(')')

    def with_square(self, fn):
        self.print('[')
        fn()
        self.print(']')

    def get(self):
        return ''.join(self._parts)


class StackedDefinitions:
    """One declarator per line, continuation lines indented one level; inline in a for header."""

    def print_definitions(self, printer, node, output, in_for):
        output.print(node.kind)
        output.space()
        if in_for or not output.options.beautify or len(node.definitions) < 2:
            for i, definition in enumerate(node.definitions):
                if i:
                    output.comma()
                printer.print(definition, output)
        else:
            def print_stacked():
                for i, definition in enumerate(node.definitions):
                    if i:
                        output.print(',')
                        output.newline()
                        output.indent()
                    printer.print(definition, output)

            # nested bodies indent from the declarator column
            output.with_indent(output.next_indent(), print_stacked)
        if not in_for:
            output.semicolon()


class InlineDefinitions:
    """All declarators on the declaration's own line."""

    def print_definitions(self, printer, node, output, in_for):
        output.print(node.kind)
        output.space()
        for i, definition in enumerate(node.definitions):
            if i:
                output.comma()
            printer.print(definition, output)
        if not in_for:
            output.semicolon()


class CodePrinter:
    def __init__(self, options=None, definitions_layout=None):
        self.options = options or OutputOptions()
        if definitions_layout is None:
            definitions_layout = StackedDefinitions() if self.options.one_var_per_line else InlineDefinitions()
        self.definitions_layout = definitions_layout
        self._stack = []

    def print_to_string(self, node):
        output = OutputStream(self.options)
        self.print(node, output)
        return output.get()

    def print(self, node, output):
        self._stack.append(node)
        try:
            method = getattr(self, f'_print_{type(node).__name__}')
            if self._needs_parens(node):
                output.with_parens(lambda: method(node, output))
            else:
                method(node, output)
        finally:
            self._stack.pop()

    def parent(self, n=0):
        index = len(self._stack) - 2 - n
        return self._stack[index] if index >= 0 else None

    # --- Parentheses ---

    def _first_in_statement(self):
        node = self._stack[-1]
        i = 0
        parent = self.parent(i)
        while parent is not None:
            if isinstance(parent, js.SimpleStatement) and parent.body is node:
                return True
            if ((isinstance(parent, js.Sequence) and parent.expressions[0] is node)
                    or (type(parent) is js.Call and parent.expression is node)
                    or (isinstance(parent, js.PropAccess) and parent.expression is node)
                    or (isinstance(parent, js.Conditional) and parent.condition is node)
                    or (isinstance(parent, js.Binary) and parent.left is node)
                    or (isinstance(parent, js.UnaryPostfix) and parent.expression is node)):
                node = parent
                i += 1
                parent = self.parent(i)
            else:
                return False
        return False

    def _needs_parens(self, node):
        parent = self.parent()
        if parent is None:
            return False

        if isinstance(node, (js.Function, js.Object)):
            return self._first_in_statement()

        if isinstance(node, js.Sequence):
            return isinstance(parent, (
                js.Call, js.Unary, js.Binary, js.VarDef, js.PropAccess, js.Array,
                js.ObjectProperty, js.Conditional,
            ))

        if isinstance(node, js.Unary):
            return isinstance(parent, js.PropAccess) and parent.expression is node or \
                type(parent) is js.Call and parent.expression is node

        if isinstance(node, js.Binary) and not isinstance(node, js.Assign):
            if isinstance(parent, js.Unary):
                return True
            if isinstance(parent, js.PropAccess) and parent.expression is node:
                return True
            if isinstance(parent, js.Call) and parent.expression is node:
                return True
            if type(parent) is js.Binary:
                parent_power = PRECEDENCE[parent.operator]
                power = PRECEDENCE[node.operator]
                if parent_power > power or (parent_power == power and parent.right is node):
                    return True
            return node.operator == 'in' and self._inside_for_init()

        if isinstance(node, (js.Assign, js.Conditional)):
            if isinstance(parent, js.Unary):
                return True
            if type(parent) is js.Binary:
                return True
            if isinstance(parent, js.Call) and parent.expression is node:
                return True
            if isinstance(parent, js.Conditional) and parent.condition is node:
                return True
            return isinstance(parent, js.PropAccess) and parent.expression is node

        if isinstance(node, js.Call) and not isinstance(node, js.New):
            return isinstance(parent, js.New) and parent.expression is node

        if isinstance(node, js.PropAccess):
            # new (a()).b() must keep the call inside the callee
            if isinstance(parent, js.New) and parent.expression is node:
                return self._contains_call(node)
            return False

        if isinstance(node, js.Number):
            return isinstance(parent, js.Dot) and parent.expression is node

        return False

    @staticmethod
    def _contains_call(node):
        while isinstance(node, js.PropAccess):
            node = node.expression
        return isinstance(node, js.Call) and not isinstance(node, js.New)

    def _inside_for_init(self):
        for i in range(len(self._stack) - 1):
            parent = self.parent(i)
            child = self._stack[-1 - i]
            if isinstance(parent, (js.For, js.ForIn)):
                return parent.init is child
            if isinstance(parent, (js.Lambda, js.Statement)) and not isinstance(parent, js.Var):
                return False
        return False

    # --- Bodies ---

    def _display_body(self, body, output, is_toplevel):
        statements = [s for s in body if not isinstance(s, js.EmptyStatement)]
        last = len(statements) - 1
        for i, statement in enumerate(statements):
            output.indent()
            self.print(statement, output)
            if i != last or not is_toplevel:
                output.newline()
                if is_toplevel:
                    output.newline()

    def _print_braced(self, body, output):
        if any(not isinstance(s, js.EmptyStatement) for s in body):
            output.with_block(lambda: self._display_body(body, output, False))
        else:
            output.print('{}')

    def _force_statement(self, statement, output):
        if self.options.bracketize:
            self._make_block(statement, output)
        elif statement is None or isinstance(statement, js.EmptyStatement):
            output.semicolon()
        else:
            self.print(statement, output)

    def _make_block(self, statement, output):
        if statement is None or isinstance(statement, js.EmptyStatement):
            output.print('{}')
        elif isinstance(statement, js.BlockStatement):
            self.print(statement, output)
        else:
            def body():
                output.indent()
                self.print(statement, output)
                output.newline()
            output.with_block(body)

    # --- Statements ---

    def _print_Toplevel(self, node, output):
        self._display_body(node.body, output, True)

    def _print_BlockStatement(self, node, output):
        self._print_braced(node.body, output)

    def _print_EmptyStatement(self, node, output):
        output.semicolon()

    def _print_Debugger(self, node, output):
        output.print('debugger')
        output.semicolon()

    def _print_SimpleStatement(self, node, output):
        self.print(node.body, output)
        output.semicolon()

    def _print_LabeledStatement(self, node, output):
        output.print(node.label)
        output.colon()
        self.print(node.body, output)

    def _print_Do(self, node, output):
        output.print('do')
        output.space()
        self._make_block(node.body, output)
        output.space()
        output.print('while')
        output.space()
        output.with_parens(lambda: self.print(node.condition, output))
        output.semicolon()

    def _print_While(self, node, output):
        output.print('while')
        output.space()
        output.with_parens(lambda: self.print(node.condition, output))
        output.space()
        self._force_statement(node.body, output)

    def _print_For(self, node, output):
        output.print('for')
        output.space()

        def head():
            if node.init is not None:
                self.print(node.init, output)
                output.print(';')
                output.space()
            else:
                output.print(';')
            if node.condition is not None:
                self.print(node.condition, output)
                output.print(';')
                output.space()
            else:
                output.print(';')
            if node.step is not None:
                self.print(node.step, output)
        output.with_parens(head)
        output.space()
        self._force_statement(node.body, output)

    def _print_ForIn(self, node, output):
        output.print('for')
        output.space()

        def head():
            self.print(node.init, output)
            output.space()
            output.print('in')
            output.space()
            self.print(node.object, output)
        output.with_parens(head)
        output.space()
        self._force_statement(node.body, output)

    def _print_With(self, node, output):
        output.print('with')
        output.space()
        output.with_parens(lambda: self.print(node.expression, output))
        output.space()
        self._force_statement(node.body, output)

    def _print_If(self, node, output):
        output.print('if')
        output.space()
        output.with_parens(lambda: self.print(node.condition, output))
        output.space()
        if node.alternative is not None:
            self._make_then(node, output)
            output.space()
            output.print('else')
            output.space()
            if isinstance(node.alternative, js.If):
                self.print(node.alternative, output)
            else:
                self._force_statement(node.alternative, output)
        else:
            self._force_statement(node.body, output)

    def _make_then(self, node, output):
        if self.options.bracketize:
            self._make_block(node.body, output)
            return
        # Without braces a nested else-less if would capture our else
        inner = node.body
        while True:
            if isinstance(inner, js.If):
                if inner.alternative is None:
                    self._make_block(node.body, output)
                    return
                inner = inner.alternative
            elif isinstance(inner, js.StatementWithBody) and not isinstance(inner, js.Do):
                inner = inner.body
            else:
                break
        self._force_statement(node.body, output)

    def _print_Return(self, node, output):
        self._print_exit('return', node, output)

    def _print_Throw(self, node, output):
        self._print_exit('throw', node, output)

    def _print_exit(self, keyword, node, output):
        output.print(keyword)
        if node.value is not None:
            output.space()
            self.print(node.value, output)
        output.semicolon()

    def _print_Break(self, node, output):
        self._print_loop_control('break', node, output)

    def _print_Continue(self, node, output):
        self._print_loop_control('continue', node, output)

    def _print_loop_control(self, keyword, node, output):
        output.print(keyword)
        if node.label:
            output.space()
            output.print(node.label)
        output.semicolon()

    def _print_Switch(self, node, output):
        output.print('switch')
        output.space()
        output.with_parens(lambda: self.print(node.expression, output))
        output.space()
        last = len(node.body) - 1
        if last < 0:
            output.print('{}')
            return

        def branches():
            for i, branch in enumerate(node.body):
                output.indent(half=True)
                self.print(branch, output)
                if i < last and branch.body:
                    output.newline()
        output.with_block(branches)

    def _print_branch_body(self, node, output):
        output.newline()
        for statement in node.body:
            output.indent()
            self.print(statement, output)
            output.newline()

    def _print_Default(self, node, output):
        output.print('default:')
        self._print_branch_body(node, output)

    def _print_Case(self, node, output):
        output.print('case')
        output.space()
        self.print(node.expression, output)
        output.print(':')
        self._print_branch_body(node, output)

    def _print_Try(self, node, output):
        output.print('try')
        output.space()
        self._print_braced(node.body, output)
        if node.bcatch is not None:
            output.space()
            self.print(node.bcatch, output)
        if node.bfinally is not None:
            output.space()
            self.print(node.bfinally, output)

    def _print_Catch(self, node, output):
        output.print('catch')
        output.space()
        output.with_parens(lambda: self.print(node.argname, output))
        output.space()
        self._print_braced(node.body, output)

    def _print_Finally(self, node, output):
        output.print('finally')
        output.space()
        self._print_braced(node.body, output)

    def _print_Var(self, node, output):
        parent = self.parent()
        in_for = isinstance(parent, (js.For, js.ForIn)) and parent.init is node
        self.definitions_layout.print_definitions(self, node, output, in_for)

    def _print_VarDef(self, node, output):
        self.print(node.name, output)
        if node.value is not None:
            output.space()
            output.print('=')
            output.space()
            self.print(node.value, output)

    # --- Functions ---

    def _print_lambda(self, node, output, keyword='function'):
        if keyword:
            output.print(keyword)
        if node.name is not None:
            if keyword:
                output.space()
            self.print(node.name, output)

        def arguments():
            for i, argname in enumerate(node.argnames):
                if i:
                    output.comma()
                self.print(argname, output)
        output.with_parens(arguments)
        output.space()
        self._print_braced(node.body, output)

    def _print_Function(self, node, output):
        self._print_lambda(node, output)

    def _print_Defun(self, node, output):
        self._print_lambda(node, output)

    def _print_Accessor(self, node, output):
        self._print_lambda(node, output, keyword=None)

    # --- Expressions ---

    def _print_args(self, node, output):
        def args():
            for i, arg in enumerate(node.args):
                if i:
                    output.comma()
                self.print(arg, output)
        output.with_parens(args)

    def _print_Call(self, node, output):
        self.print(node.expression, output)
        self._print_args(node, output)

    def _print_New(self, node, output):
        output.print('new')
        output.space()
        self.print(node.expression, output)
        self._print_args(node, output)

    def _print_Sequence(self, node, output):
        for i, expression in enumerate(node.expressions):
            if i:
                output.comma()
            self.print(expression, output)

    def _print_Dot(self, node, output):
        self.print(node.expression, output)
        output.print('.')
        output.print(to_ascii(node.property, identifier=True) if self.options.ascii_only else node.property)

    def _print_Sub(self, node, output):
        self.print(node.expression, output)
        output.with_square(lambda: self.print(node.property, output))

    def _print_UnaryPrefix(self, node, output):
        output.print(node.operator)
        if node.operator in _WORD_OPERATORS:
            output.space()
        self.print(node.expression, output)

    def _print_UnaryPostfix(self, node, output):
        self.print(node.expression, output)
        output.print(node.operator)

    def _print_Binary(self, node, output):
        self.print(node.left, output)
        output.space()
        output.print(node.operator)
        output.space()
        self.print(node.right, output)

    def _print_Assign(self, node, output):
        self._print_Binary(node, output)

    def _print_Conditional(self, node, output):
        self.print(node.condition, output)
        output.space()
        output.print('?')
        output.space()
        self.print(node.consequent, output)
        output.space()
        output.colon()
        self.print(node.alternative, output)

    def _print_Array(self, node, output):
        def elements():
            count = len(node.elements)
            if count:
                output.space()
            for i, element in enumerate(node.elements):
                if i:
                    output.comma()
                self.print(element, output)
                # A trailing hole needs its own comma to survive
                if i == count - 1 and isinstance(element, js.Hole):
                    output.comma()
            if count:
                output.space()
        output.with_square(elements)

    def _print_Hole(self, node, output):
        pass

    def _print_Object(self, node, output):
        if not node.properties:
            output.print('{}')
            return

        def properties():
            for i, prop in enumerate(node.properties):
                if i:
                    output.print(',')
                    output.newline()
                output.indent()
                self.print(prop, output)
            output.newline()
        output.with_block(properties)

    def _print_property_key(self, key, output):
        if re.fullmatch(r'[A-Za-z_$][\w$]*', key) or re.fullmatch(r'0|[1-9]\d*', key):
            output.print(key)
        else:
            output.print(make_string(key, self.options.ascii_only))

    def _print_ObjectKeyVal(self, node, output):
        self._print_property_key(node.key, output)
        output.colon()
        self.print(node.value, output)

    def _print_ObjectGetter(self, node, output):
        output.print('get')
        output.space()
        self._print_property_key(node.key, output)
        self.print(node.value, output)

    def _print_ObjectSetter(self, node, output):
        output.print('set')
        output.space()
        self._print_property_key(node.key, output)
        self.print(node.value, output)

    # --- Symbols and literals ---

    def _print_symbol(self, node, output):
        name = node.display_name
        output.print(to_ascii(name, identifier=True) if self.options.ascii_only else name)

    _print_SymbolVar = _print_symbol
    _print_SymbolFunarg = _print_symbol
    _print_SymbolDefun = _print_symbol
    _print_SymbolLambda = _print_symbol
    _print_SymbolCatch = _print_symbol
    _print_SymbolRef = _print_symbol

    def _print_This(self, node, output):
        output.print('this')

    def _print_String(self, node, output):
        output.print(make_string(node.value, self.options.ascii_only))

    def _print_Number(self, node, output):
        output.print(format_number(node.value))

    def _print_RegExp(self, node, output):
        output.print(to_ascii(node.value) if self.options.ascii_only else node.value)

    def _print_Null(self, node, output):
        output.print('null')

    def _print_NaN(self, node, output):
        output.print('NaN')

    def _print_Infinity(self, node, output):
        output.print('Infinity')

    def _print_Boolean(self, node, output):
        output.print('true' if node.value else 'false')


def print_to_string(node, options=None, definitions_layout=None):
    """Print any node (usually a ``Toplevel``) as JavaScript source."""
    return CodePrinter(options, definitions_layout).print_to_string(node)
