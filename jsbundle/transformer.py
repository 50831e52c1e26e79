"""
Lark parse tree to syntax tree transformation.
"""
import re

from lark import Transformer, v_args

from .errors import JSSyntaxError, get_line_context
from . import nodes as js
from .nodes import PRECEDENCE
from .printer import format_number

_SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v',
}
_OCTAL_ESCAPE = re.compile(r'[0-7]{1,3}')
_LINE_TERMINATORS = '\n\u2028\u2029'


def decode_string(token):
    """Turn a quoted JavaScript string literal into its value."""
    body = str(token)[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != '\\':
            out.append(ch)
            i += 1
            continue
        i += 1
        ch = body[i]
        if ch == 'x':
            out.append(chr(int(body[i + 1:i + 3], 16)))
            i += 3
        elif ch == 'u' and body[i + 1:i + 2] == '{':
            end = body.index('}', i)
            out.append(chr(int(body[i + 2:end], 16)))
            i = end + 1
        elif ch == 'u':
            out.append(chr(int(body[i + 1:i + 5], 16)))
            i += 5
        elif ch in '01234567':
            digits = _OCTAL_ESCAPE.match(body, i).group()
            if digits[0] in '0123':
                digits = digits[:3]
            else:
                digits = digits[:2]
            out.append(chr(int(digits, 8)))
            i += len(digits)
        elif ch == '\r':
            # Line continuation, CRLF or CR
            i += 2 if body[i + 1:i + 2] == '\n' else 1
        elif ch in _LINE_TERMINATORS:
            i += 1
        else:
            out.append(_SIMPLE_ESCAPES.get(ch, ch))
            i += 1
    # Join surrogate pairs written as two \u escapes
    return ''.join(out).encode('utf-16', 'surrogatepass').decode('utf-16')


def parse_number(token):
    text = str(token)
    if text[:2] in ('0x', '0X'):
        return int(text, 16)
    if re.fullmatch(r'\d+', text):
        return int(text)
    return float(text)


def fold_binary(operands, operators):
    """Rebuild a flat operand/operator chain into a precedence-correct tree."""
    output = [operands[0]]
    pending = []

    def reduce():
        right = output.pop()
        left = output.pop()
        output.append(js.Binary(operator=pending.pop(), left=left, right=right, start_line=left.start_line))

    for operator, operand in zip(operators, operands[1:]):
        while pending and PRECEDENCE[pending[-1]] >= PRECEDENCE[operator]:
            reduce()
        pending.append(operator)
        output.append(operand)
    while pending:
        reduce()
    return output[0]


@v_args(meta=True)
class JSTransformer(Transformer):
    """Builds ``jsbundle.nodes`` trees from Lark parse trees."""

    def __init__(self, filename=None, source=None):
        super().__init__()
        self.filename = filename
        self.source = source

    def _error(self, message, meta, suggestion=None):
        line = getattr(meta, 'line', None)
        return JSSyntaxError(
            message,
            filename=self.filename,
            line_number=line,
            column=getattr(meta, 'column', None),
            context=get_line_context(self.source, line),
            suggestion=suggestion,
        )

    @staticmethod
    def _line(meta):
        return getattr(meta, 'line', None)

    # --- Statements ---

    def start(self, meta, children):
        return js.Toplevel(body=list(children), start_line=1)

    def block(self, meta, children):
        return js.BlockStatement(body=list(children), start_line=self._line(meta))

    def var_stmt(self, meta, children):
        return children[0]

    def var_decls(self, meta, children):
        kind, *definitions = children
        return js.Var(kind=str(kind), definitions=definitions, start_line=self._line(meta))

    def var_decl(self, meta, children):
        name, value = children
        symbol = js.SymbolVar(name=str(name), start_line=name.line)
        return js.VarDef(name=symbol, value=value, start_line=self._line(meta))

    def empty_stmt(self, meta, children):
        return js.EmptyStatement(start_line=self._line(meta))

    def expr_stmt(self, meta, children):
        return js.SimpleStatement(body=children[0], start_line=self._line(meta))

    def if_stmt(self, meta, children):
        condition, body, alternative = children
        return js.If(condition=condition, body=body, alternative=alternative, start_line=self._line(meta))

    def do_stmt(self, meta, children):
        body, condition = children
        return js.Do(body=body, condition=condition, start_line=self._line(meta))

    def while_stmt(self, meta, children):
        condition, body = children
        return js.While(condition=condition, body=body, start_line=self._line(meta))

    def for_stmt(self, meta, children):
        init, condition, step, body = children
        return js.For(init=init, condition=condition, step=step, body=body, start_line=self._line(meta))

    def for_in_stmt(self, meta, children):
        head, body = children
        if not (isinstance(head, js.Binary) and head.operator == 'in'):
            raise self._error("Invalid for statement header", meta,
                              "Use 'for (init; test; step)' or 'for (name in object)'")
        return js.ForIn(init=head.left, object=head.right, body=body, start_line=self._line(meta))

    def for_in_var_stmt(self, meta, children):
        kind, name, _, obj, body = children
        symbol = js.SymbolVar(name=str(name), start_line=name.line)
        init = js.Var(kind=str(kind), definitions=[js.VarDef(name=symbol, value=None, start_line=name.line)],
                      start_line=kind.line)
        return js.ForIn(init=init, object=obj, body=body, start_line=self._line(meta))

    def continue_stmt(self, meta, children):
        label = children[0]
        return js.Continue(label=str(label) if label is not None else None, start_line=self._line(meta))

    def break_stmt(self, meta, children):
        label = children[0]
        return js.Break(label=str(label) if label is not None else None, start_line=self._line(meta))

    def return_stmt(self, meta, children):
        return js.Return(value=children[0], start_line=self._line(meta))

    def with_stmt(self, meta, children):
        expression, body = children
        return js.With(expression=expression, body=body, start_line=self._line(meta))

    def switch_stmt(self, meta, children):
        expression, *branches = children
        return js.Switch(expression=expression, body=branches, start_line=self._line(meta))

    def case_clause(self, meta, children):
        expression, *body = children
        return js.Case(expression=expression, body=body, start_line=self._line(meta))

    def default_clause(self, meta, children):
        return js.Default(body=list(children), start_line=self._line(meta))

    def labeled_stmt(self, meta, children):
        label, body = children
        return js.LabeledStatement(label=str(label), body=body, start_line=self._line(meta))

    def throw_stmt(self, meta, children):
        return js.Throw(value=children[0], start_line=self._line(meta))

    def try_stmt(self, meta, children):
        block, *handlers = children
        bcatch = next((h for h in handlers if isinstance(h, js.Catch)), None)
        bfinally = next((h for h in handlers if isinstance(h, js.Finally)), None)
        return js.Try(body=block.body, bcatch=bcatch, bfinally=bfinally, start_line=self._line(meta))

    def catch_clause(self, meta, children):
        name, block = children
        argname = js.SymbolCatch(name=str(name), start_line=name.line)
        return js.Catch(argname=argname, body=block.body, start_line=self._line(meta))

    def finally_clause(self, meta, children):
        return js.Finally(body=children[0].body, start_line=self._line(meta))

    def debugger_stmt(self, meta, children):
        return js.Debugger(start_line=self._line(meta))

    # --- Functions ---

    def function_decl(self, meta, children):
        name, argnames, body = children
        symbol = js.SymbolDefun(name=str(name), start_line=name.line)
        return js.Defun(name=symbol, argnames=argnames, body=body, start_line=self._line(meta))

    def function_expr(self, meta, children):
        name, argnames, body = children
        symbol = js.SymbolLambda(name=str(name), start_line=name.line) if name is not None else None
        return js.Function(name=symbol, argnames=argnames, body=body, start_line=self._line(meta))

    def params(self, meta, children):
        return [js.SymbolFunarg(name=str(t), start_line=t.line) for t in children]

    def function_body(self, meta, children):
        return list(children)

    # --- Expressions ---

    def sequence(self, meta, children):
        left, right = children
        if isinstance(left, js.Sequence):
            return js.Sequence(expressions=left.expressions + [right], start_line=left.start_line)
        return js.Sequence(expressions=[left, right], start_line=self._line(meta))

    def assign(self, meta, children):
        left, operator, right = children
        return js.Assign(operator=operator, left=left, right=right, start_line=self._line(meta))

    def assign_op(self, meta, children):
        return str(children[0])

    def conditional(self, meta, children):
        condition, consequent, alternative = children
        return js.Conditional(condition=condition, consequent=consequent, alternative=alternative,
                              start_line=self._line(meta))

    def binary(self, meta, children):
        return fold_binary(children[0::2], children[1::2])

    def binop(self, meta, children):
        return str(children[0])

    def unary_prefix(self, meta, children):
        operator, expression = children
        return js.UnaryPrefix(operator=operator, expression=expression, start_line=self._line(meta))

    def unary_op(self, meta, children):
        return str(children[0])

    def unary_postfix(self, meta, children):
        expression, operator = children
        return js.UnaryPostfix(operator=operator, expression=expression, start_line=self._line(meta))

    def postfix_op(self, meta, children):
        return str(children[0])

    def new_noargs(self, meta, children):
        return js.New(expression=children[0], args=[], start_line=self._line(meta))

    def new(self, meta, children):
        expression, args = children
        return js.New(expression=expression, args=args, start_line=self._line(meta))

    def call(self, meta, children):
        expression, args = children
        return js.Call(expression=expression, args=args, start_line=self._line(meta))

    def arguments(self, meta, children):
        return list(children)

    def dot(self, meta, children):
        expression, prop = children
        return js.Dot(expression=expression, property=prop, start_line=self._line(meta))

    def prop_ident(self, meta, children):
        return str(children[0])

    def sub(self, meta, children):
        expression, prop = children
        return js.Sub(expression=expression, property=prop, start_line=self._line(meta))

    # --- Primaries ---

    def this(self, meta, children):
        return js.This(start_line=self._line(meta))

    def name(self, meta, children):
        return js.SymbolRef(name=str(children[0]), start_line=self._line(meta))

    def number(self, meta, children):
        return js.Number(value=parse_number(children[0]), start_line=self._line(meta))

    def string(self, meta, children):
        return js.String(value=decode_string(children[0]), start_line=self._line(meta))

    def regex(self, meta, children):
        return js.RegExp(value=str(children[0]), start_line=self._line(meta))

    def null(self, meta, children):
        return js.Null(start_line=self._line(meta))

    def true(self, meta, children):
        return js.Boolean(value=True, start_line=self._line(meta))

    def false(self, meta, children):
        return js.Boolean(value=False, start_line=self._line(meta))

    def array(self, meta, children):
        elements = list(children)
        # "[a, b,]" has two elements, "[]" has none
        if elements and isinstance(elements[-1], js.Hole):
            elements.pop()
        return js.Array(elements=elements, start_line=self._line(meta))

    def element(self, meta, children):
        if not children:
            return js.Hole(start_line=self._line(meta))
        return children[0]

    def object(self, meta, children):
        return js.Object(properties=list(children), start_line=self._line(meta))

    def key_value(self, meta, children):
        key, value = children
        return js.ObjectKeyVal(key=self._property_key(key), value=value, start_line=self._line(meta))

    def accessor(self, meta, children):
        kind, key, argnames, body = children
        function = js.Accessor(name=None, argnames=argnames, body=body, start_line=self._line(meta))
        if kind == 'get':
            return js.ObjectGetter(key=self._property_key(key), value=function, start_line=self._line(meta))
        if kind == 'set':
            return js.ObjectSetter(key=self._property_key(key), value=function, start_line=self._line(meta))
        raise self._error(f"Unexpected token '{kind}' in object literal", meta,
                          "Only 'get' and 'set' may precede a property name")

    @staticmethod
    def _property_key(token):
        if token.type == 'STRING':
            return decode_string(token)
        if token.type == 'NUMBER':
            return format_number(parse_number(token))
        return str(token)
