"""
JavaScript syntax tree.

The node set follows the UglifyJS tree closely because every later pass
(scope analysis, kernel matching, printing, normalisation) is written in
terms of it. Each class lists its child slots in ``_fields``; a slot holds
a node, a list of nodes, a plain value or None.
"""


# Binding power of each binary operator; higher binds tighter.
PRECEDENCE = {}
for _power, _operators in enumerate([
        ["||"],
        ["&&"],
        ["|"],
        ["^"],
        ["&"],
        ["==", "===", "!=", "!=="],
        ["<", ">", "<=", ">=", "in", "instanceof"],
        [">>", "<<", ">>>"],
        ["+", "-"],
        ["*", "/", "%"],
], start=1):
    for _operator in _operators:
        PRECEDENCE[_operator] = _power


class Node:
    _fields = ()

    def __init__(self, start_line=None, **kwargs):
        for name in self._fields:
            setattr(self, name, kwargs.pop(name, None))
        if kwargs:
            raise TypeError(f"{type(self).__name__} got unexpected fields: {', '.join(kwargs)}")
        self.start_line = start_line

    def children(self):
        """Yield direct child nodes in source order."""
        for name in self._fields:
            value = getattr(self, name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, Node):
                        yield item

    def transform_children(self, fn):
        """Replace every child node by ``fn(child)``, in place."""
        for name in self._fields:
            value = getattr(self, name)
            if isinstance(value, Node):
                setattr(self, name, fn(value))
            elif isinstance(value, list):
                setattr(self, name, [fn(item) if isinstance(item, Node) else item for item in value])

    def __repr__(self):
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._fields)
        return f"{type(self).__name__}({fields})"


class TreeWalker:
    """
    Top-down walk over a tree.

    ``visit(node, descend)`` is called for every node; returning a true value
    skips the node's children. ``descend()`` walks the children immediately.
    """

    def __init__(self, visit):
        self._visit = visit
        self.stack = []

    def parent(self, n=0):
        """Return the n-th ancestor of the node being visited."""
        index = len(self.stack) - 2 - n
        return self.stack[index] if index >= 0 else None

    def walk(self, node):
        self.stack.append(node)
        try:
            if not self._visit(node, lambda: self._descend(node)):
                self._descend(node)
        finally:
            self.stack.pop()

    def _descend(self, node):
        for child in node.children():
            self.walk(child)


# --- Statements ---

class Statement(Node):
    pass


class EmptyStatement(Statement):
    pass


class Debugger(Statement):
    pass


class SimpleStatement(Statement):
    """An expression used as a statement."""
    _fields = ('body',)


class Block(Statement):
    """Any statement holding a list of statements in ``body``."""
    _fields = ('body',)


class BlockStatement(Block):
    pass


class Toplevel(Block):
    variables = None
    globals = None
    parent_scope = None


class StatementWithBody(Statement):
    """Any statement holding a single statement in ``body``."""
    _fields = ('body',)


class LabeledStatement(StatementWithBody):
    _fields = ('label', 'body')


class IterationStatement(StatementWithBody):
    pass


class Do(IterationStatement):
    _fields = ('body', 'condition')


class While(IterationStatement):
    _fields = ('condition', 'body')


class For(IterationStatement):
    _fields = ('init', 'condition', 'step', 'body')


class ForIn(IterationStatement):
    _fields = ('init', 'object', 'body')


class With(StatementWithBody):
    _fields = ('expression', 'body')


class If(StatementWithBody):
    _fields = ('condition', 'body', 'alternative')


class Jump(Statement):
    pass


class Exit(Jump):
    _fields = ('value',)


class Return(Exit):
    pass


class Throw(Exit):
    pass


class LoopControl(Jump):
    _fields = ('label',)


class Break(LoopControl):
    pass


class Continue(LoopControl):
    pass


class Switch(Block):
    _fields = ('expression', 'body')


class SwitchBranch(Block):
    pass


class Default(SwitchBranch):
    pass


class Case(SwitchBranch):
    _fields = ('expression', 'body')


class Try(Block):
    _fields = ('body', 'bcatch', 'bfinally')


class Catch(Block):
    _fields = ('argname', 'body')
    variables = None
    parent_scope = None


class Finally(Block):
    pass


class Var(Statement):
    """A ``var``, ``let`` or ``const`` declaration list."""
    _fields = ('kind', 'definitions')


class VarDef(Node):
    _fields = ('name', 'value')


# --- Functions ---

class Lambda(Node):
    _fields = ('name', 'argnames', 'body')
    variables = None
    parent_scope = None


class Function(Lambda):
    pass


class Accessor(Lambda):
    pass


class Defun(Lambda, Statement):
    pass


# --- Expressions ---

class Call(Node):
    _fields = ('expression', 'args')


class New(Call):
    pass


class Sequence(Node):
    _fields = ('expressions',)


class PropAccess(Node):
    _fields = ('expression', 'property')


class Dot(PropAccess):
    pass


class Sub(PropAccess):
    pass


class Unary(Node):
    _fields = ('operator', 'expression')


class UnaryPrefix(Unary):
    pass


class UnaryPostfix(Unary):
    pass


class Binary(Node):
    _fields = ('operator', 'left', 'right')


class Assign(Binary):
    pass


class Conditional(Node):
    _fields = ('condition', 'consequent', 'alternative')


class Array(Node):
    _fields = ('elements',)


class Hole(Node):
    """An elided array element."""


class Object(Node):
    _fields = ('properties',)


class ObjectProperty(Node):
    _fields = ('key', 'value')


class ObjectKeyVal(ObjectProperty):
    pass


class ObjectGetter(ObjectProperty):
    pass


class ObjectSetter(ObjectProperty):
    pass


# --- Symbols ---

class Symbol(Node):
    _fields = ('name',)
    thedef = None

    @property
    def display_name(self):
        """The name the printer shows: a definition's rename wins over the source name."""
        if self.thedef is not None and self.thedef.mangled_name:
            return self.thedef.mangled_name
        return self.name


class SymbolDeclaration(Symbol):
    pass


class SymbolVar(SymbolDeclaration):
    pass


class SymbolFunarg(SymbolVar):
    pass


class SymbolDefun(SymbolDeclaration):
    pass


class SymbolLambda(SymbolDeclaration):
    pass


class SymbolCatch(SymbolDeclaration):
    pass


class SymbolRef(Symbol):
    pass


class This(Node):
    pass


# --- Literals ---

class Constant(Node):
    _fields = ('value',)


class String(Constant):
    pass


class Number(Constant):
    pass


class RegExp(Constant):
    """A regular expression literal, kept as its source text."""


class Atom(Node):
    pass


class Null(Atom):
    pass


class NaN(Atom):
    pass


class Infinity(Atom):
    pass


class Boolean(Atom):
    _fields = ('value',)


def as_statement(node):
    """Wrap an expression in a statement; statements pass through."""
    if isinstance(node, Statement):
        return node
    return SimpleStatement(body=node, start_line=node.start_line)
