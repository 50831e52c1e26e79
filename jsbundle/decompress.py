"""
Normalisation of minified code.

Undoes a few rewrites minifiers apply: comma sequences in statement
positions, ``a && b()`` and ``a ? b() : c()`` used as statements, ternary
returns, ``return void x()`` and the numeric spellings of NaN, Infinity,
true and false.

Every rule is a visitor with ``visit_<NodeClass>`` methods, looked up
along the node's class hierarchy. A visit method either returns a
replacement node, which is normalised again from scratch, or rewrites
statement lists in place and returns None.
"""
from . import nodes as js
from .config import DecompressOptions
from .diagnostics import debug_log


def is_undefined(node):
    """``undefined`` (not shadowed) or ``void <number>``."""
    if isinstance(node, js.SymbolRef):
        return node.name == 'undefined' and (node.thedef is None or node.thedef.global_)
    return isinstance(node, js.UnaryPrefix) and node.operator == 'void' and isinstance(node.expression, js.Number)


def has_side_effect_free_target(node):
    """Can the assignment target be evaluated after its right-hand side without changing behaviour?"""
    while isinstance(node, js.Dot):
        node = node.expression
    return isinstance(node, (js.SymbolRef, js.This))


class Rule:
    """Base visitor; subclasses define ``visit_<NodeClass>`` methods."""
    option = None

    def apply(self, node):
        for cls in type(node).__mro__:
            method = getattr(self, f'visit_{cls.__name__}', None)
            if method is not None:
                return method(node)
        return None

    @staticmethod
    def rewrite_statements(statements, split):
        """Replace every statement by the list ``split`` returns for it (None keeps it)."""
        result = []
        changed = False
        for statement in statements:
            parts = split(statement)
            if parts is None:
                result.append(statement)
            else:
                changed = True
                result.extend(parts)
        return result, changed

    def rewrite_body(self, node, split, attribute='body'):
        """Apply ``split`` to a single-statement slot, wrapping several results in a block."""
        statement = getattr(node, attribute)
        if statement is None:
            return
        parts, changed = self.rewrite_statements([statement], split)
        if not changed:
            return
        if len(parts) == 1:
            setattr(node, attribute, parts[0])
        else:
            setattr(node, attribute, js.BlockStatement(body=parts, start_line=statement.start_line))


class ConstantsRule(Rule):
    """0/0, 1/0, !0 and !1 back to NaN, Infinity, true and false."""
    option = 'constants'

    def visit_Binary(self, node):
        if type(node) is not js.Binary or node.operator != '/':
            return None
        left, right = node.left, node.right
        if not (isinstance(left, js.Number) and isinstance(right, js.Number) and right.value == 0):
            return None
        if left.value == 0:
            return js.NaN(start_line=node.start_line)
        if left.value == 1:
            return js.Infinity(start_line=node.start_line)
        return None

    def visit_UnaryPrefix(self, node):
        if node.operator != '!' or not isinstance(node.expression, js.Number):
            return None
        if node.expression.value == 0:
            return js.Boolean(value=True, start_line=node.start_line)
        if node.expression.value == 1:
            return js.Boolean(value=False, start_line=node.start_line)
        return None


# Statement types whose single expression slot may hold a sequence to split
SEQUENCE_SLOTS = {
    js.Return: 'value',
    js.SimpleStatement: 'body',
    js.If: 'condition',
    js.For: 'init',
    js.With: 'expression',
    js.Switch: 'expression',
}


class SequencesRule(Rule):
    """Split ``a(), b()`` in statement positions into separate statements."""
    option = 'sequences'

    def visit_Block(self, node):
        node.body, _ = self.rewrite_statements(node.body, self.split)

    def visit_Lambda(self, node):
        node.body, _ = self.rewrite_statements(node.body, self.split)

    def visit_StatementWithBody(self, node):
        if isinstance(node, js.LabeledStatement):
            # Hoisting out of a labelled loop would detach the label from the loop
            return
        self.rewrite_body(node, self.split)
        if isinstance(node, js.If):
            self.rewrite_body(node, self.split, 'alternative')

    def split(self, statement):
        """The statements ``statement`` becomes, or None if it has nothing to split."""
        parts = self._split_slot(statement)
        if parts is None:
            parts = self._split_definitions(statement)
        if parts is None:
            parts = self._split_assignment(statement)
        if parts is None:
            return None
        # Hoisted statements may hold sequences of their own
        result, _ = self.rewrite_statements(parts, self.split)
        return result

    @staticmethod
    def _split_slot(statement):
        slot = SEQUENCE_SLOTS.get(type(statement))
        if slot is None:
            return None
        value = getattr(statement, slot)
        if not isinstance(value, js.Sequence):
            return None
        *leading, last = value.expressions
        setattr(statement, slot, last)
        return [js.as_statement(expression) for expression in leading] + [statement]

    @staticmethod
    def _split_definitions(statement):
        if not isinstance(statement, js.Var):
            return None
        if not any(isinstance(d.value, js.Sequence) for d in statement.definitions):
            return None
        result = []
        current = []
        for definition in statement.definitions:
            if isinstance(definition.value, js.Sequence):
                if current:
                    result.append(js.Var(kind=statement.kind, definitions=current, start_line=statement.start_line))
                    current = []
                *leading, last = definition.value.expressions
                result.extend(js.as_statement(expression) for expression in leading)
                definition.value = last
            current.append(definition)
        result.append(js.Var(kind=statement.kind, definitions=current, start_line=statement.start_line))
        return result

    @staticmethod
    def _split_assignment(statement):
        if not isinstance(statement, js.SimpleStatement):
            return None
        assign = statement.body
        if not (isinstance(assign, js.Assign) and isinstance(assign.right, js.Sequence)):
            return None
        if not has_side_effect_free_target(assign.left):
            return None
        *leading, last = assign.right.expressions
        assign.right = last
        return [js.as_statement(expression) for expression in leading] + [statement]


class ConditionalsRule(Rule):
    """Short-circuit and ternary statements to ``if``; ``return void x`` to ``x; return;``."""
    option = 'conditionals'

    def visit_SimpleStatement(self, node):
        body = node.body
        if type(body) is js.Binary and body.operator in ('&&', '||'):
            condition = body.left
            if body.operator == '||':
                condition = js.UnaryPrefix(operator='!', expression=condition, start_line=condition.start_line)
            return js.If(condition=condition, body=js.as_statement(body.right), alternative=None,
                         start_line=node.start_line)
        if isinstance(body, js.Conditional):
            return js.If(condition=body.condition, body=js.as_statement(body.consequent),
                         alternative=js.as_statement(body.alternative), start_line=node.start_line)
        return None

    def visit_Return(self, node):
        if not isinstance(node.value, js.Conditional):
            return None
        value = node.value
        return js.If(
            condition=value.condition,
            body=self._make_return(value.consequent, node),
            alternative=self._make_return(value.alternative, node),
            start_line=node.start_line,
        )

    def visit_Block(self, node):
        node.body, _ = self.rewrite_statements(node.body, self.split_void_return)

    def visit_Lambda(self, node):
        node.body, _ = self.rewrite_statements(node.body, self.split_void_return)

    def visit_StatementWithBody(self, node):
        self.rewrite_body(node, self.split_void_return)
        if isinstance(node, js.If):
            self.rewrite_body(node, self.split_void_return, 'alternative')

    @staticmethod
    def _make_return(value, original):
        if is_undefined(value):
            value = None
        return js.Return(value=value, start_line=original.start_line)

    @staticmethod
    def split_void_return(statement):
        if not (isinstance(statement, js.Return) and isinstance(statement.value, js.UnaryPrefix)
                and statement.value.operator == 'void'):
            return None
        expression = statement.value.expression
        statement.value = None
        if isinstance(expression, (js.Constant, js.Atom)):
            return [statement]
        return [js.as_statement(expression), statement]


class Decompressor:
    """Applies the enabled rules top-down; a replaced node is normalised again."""

    def __init__(self, options=None):
        self.options = options or DecompressOptions()
        self.rules = [
            rule for rule in (ConstantsRule(), SequencesRule(), ConditionalsRule())
            if getattr(self.options, rule.option)
        ]

    def transform(self, node):
        for rule in self.rules:
            replacement = rule.apply(node)
            if replacement is not None:
                return self.transform(replacement)
        node.transform_children(self.transform)
        return node


def decompress(node, options=None):
    """Normalise ``node`` in place and return it."""
    debug_log(f"Normalising {type(node).__name__}")
    return Decompressor(options).transform(node)
