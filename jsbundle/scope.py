"""
Scope analysis.

Binds every symbol in a tree to a ``SymbolDef``. Later passes rely on
this in two ways: a rename is done by setting ``SymbolDef.mangled_name``
(the printer shows it for the declaration and every reference), and
``require`` calls are recognised through the definition they resolve to.
"""
from . import nodes as js


class SymbolDef:
    """One binding: its declarations, its references and an optional display name."""

    def __init__(self, scope, name, orig=None):
        self.scope = scope
        self.name = name
        self.orig = [orig] if orig is not None else []
        self.references = []
        self.global_ = False
        self.mangled_name = None

    def __repr__(self):
        return f"SymbolDef({self.name!r}, global_={self.global_}, mangled_name={self.mangled_name!r})"


def define(scope, symbol):
    """Declare ``symbol`` in ``scope``; redeclarations share one definition."""
    thedef = scope.variables.get(symbol.name)
    if thedef is None:
        thedef = SymbolDef(scope, symbol.name, symbol)
        scope.variables[symbol.name] = thedef
    else:
        thedef.orig.append(symbol)
    symbol.thedef = thedef
    return thedef


def find_variable(scope, name):
    while scope is not None:
        thedef = scope.variables.get(name)
        if thedef is not None:
            return thedef
        scope = scope.parent_scope
    return None


def _hoist_declarations(scope, statements):
    """Declare every var and function declaration of a function body in ``scope``."""
    def visit(node, descend):
        if isinstance(node, js.Defun):
            define(scope, node.name)
            return True
        if isinstance(node, js.Lambda):
            return True
        if isinstance(node, js.VarDef):
            define(scope, node.name)
        return False

    walker = js.TreeWalker(visit)
    for statement in statements:
        walker.walk(statement)


def _open_function_scope(function, parent_scope):
    function.variables = {}
    function.parent_scope = parent_scope
    for argname in function.argnames:
        define(function, argname)
    _hoist_declarations(function, function.body)
    # A function expression's own name is visible inside it unless shadowed
    if isinstance(function, js.Function) and function.name is not None:
        if function.name.name in function.variables:
            function.name.thedef = function.variables[function.name.name]
        else:
            define(function, function.name)


def figure_out_scope(toplevel):
    """Resolve every symbol in ``toplevel``; unresolved names become globals."""
    toplevel.variables = {}
    toplevel.globals = {}
    toplevel.parent_scope = None
    _hoist_declarations(toplevel, toplevel.body)

    scopes = [toplevel]

    def reference(symbol):
        thedef = find_variable(scopes[-1], symbol.name)
        if thedef is None:
            thedef = toplevel.globals.get(symbol.name)
            if thedef is None:
                thedef = SymbolDef(toplevel, symbol.name)
                thedef.global_ = True
                toplevel.globals[symbol.name] = thedef
        symbol.thedef = thedef
        thedef.references.append(symbol)

    def visit(node, descend):
        if isinstance(node, js.Lambda):
            _open_function_scope(node, scopes[-1])
            scopes.append(node)
            descend()
            scopes.pop()
            return True
        if isinstance(node, js.Catch):
            node.variables = {}
            node.parent_scope = scopes[-1]
            define(node, node.argname)
            scopes.append(node)
            descend()
            scopes.pop()
            return True
        if isinstance(node, js.SymbolRef):
            reference(node)
            return True
        return False

    walker = js.TreeWalker(visit)
    for statement in toplevel.body:
        walker.walk(statement)
    return toplevel
