"""
Module assembly.

Turns the module map into one program tree per resolved name: the module
function's body becomes the program, its parameters print under their
CommonJS names, and ``require`` calls point at the extracted files.
"""
import posixpath
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict

from . import nodes as js
from .diagnostics import debug_log
from .errors import UnresolvedModuleError
from .resolver import (
    ModuleKind,
    classify_module,
    module_entries,
    package_name,
    require_edges,
    strip_extension,
)
from .scope import SymbolDef

# What browserify passes to every module function, in order
CANONICAL_ARGUMENTS = ('require', 'module', 'exports', 'moduleSource', 'loadedModules', 'mainIds')


class ModuleRecord(BaseModel):
    """One module of the bundle, ready to be assembled."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    name: str
    function: js.Function
    require_mapping: List[Tuple[str, str]]


def build_module_record(module_id, function, require_map, names, filename=None):
    """Pair every require specifier of a module with its target's resolved name."""
    name = names.get(module_id)
    if name is None:
        raise UnresolvedModuleError(
            f"Module {module_id} was never given a name",
            filename=filename,
            line_number=function.start_line,
            suggestion="Only modules reachable from an entry module can be extracted",
        )
    mapping = []
    for specifier, target in require_edges(require_map):
        target_name = names.get(target)
        if target_name is None:
            raise UnresolvedModuleError(
                f"Module {name} requires {specifier!r} as module {target}, which has no name",
                filename=filename,
                line_number=require_map.start_line,
            )
        mapping.append((specifier, target_name))
    return ModuleRecord(id=module_id, name=name, function=function, require_mapping=mapping)


def rename_arguments(function):
    """Show the module function's parameters under their canonical names."""
    for argname, canonical in zip(function.argnames, CANONICAL_ARGUMENTS):
        if argname.name == canonical:
            continue
        if argname.thedef is None:
            argname.thedef = SymbolDef(function, argname.name, argname)
        argname.thedef.mangled_name = canonical


def relative_specifier(from_name, target_name):
    """The ``require`` argument that loads ``target_name`` from the file of ``from_name``."""
    directory = posixpath.dirname(from_name) or '.'
    relative = posixpath.relpath(strip_extension(target_name), directory)
    if not relative.startswith('../'):
        relative = f'./{relative}'
    return f'{relative}.js'


def is_require(callee):
    if not isinstance(callee, js.SymbolRef):
        return False
    if callee.name == 'require':
        return True
    return callee.thedef is not None and callee.thedef.mangled_name == 'require'


def update_requires(record):
    """Point every ``require("...")`` of the module at the extracted file of its target."""
    mapping = dict(record.require_mapping)

    def visit(node, descend):
        if not (isinstance(node, js.Call) and not isinstance(node, js.New) and is_require(node.expression)):
            return False
        if len(node.args) != 1 or not isinstance(node.args[0], js.String):
            return False
        target = mapping.get(node.args[0].value)
        if target is not None and classify_module(target) is ModuleKind.LOCAL:
            node.args[0].value = relative_specifier(record.name, target)
        return False

    walker = js.TreeWalker(visit)
    for statement in record.function.body:
        walker.walk(statement)


def extract_modules(module_map, names, dependencies=None, filename=None):
    """
    Build ``{name: Toplevel}`` for every extractable module.

    Entry names always get a tree. Builtin modules are dropped and
    published packages are added to ``dependencies`` instead of extracted.
    Modules sharing a name are concatenated in bundle order.
    """
    if dependencies is None:
        dependencies = set()
    modules = {name: js.Toplevel(body=[]) for name in names.entry_names}

    for module_id, (function, require_map) in module_entries(module_map, filename).items():
        name = names.get(module_id)
        if name is None:
            debug_log(f"Skipping unreachable module {module_id}")
            continue
        kind = classify_module(name)
        if kind is ModuleKind.BUILTIN:
            debug_log(f"Skipping builtin module {name}")
            continue
        if kind is ModuleKind.DEPENDENCY:
            dependencies.add(package_name(name))
            debug_log(f"Recording dependency {package_name(name)}")
            continue

        record = build_module_record(module_id, function, require_map, names, filename)
        rename_arguments(record.function)
        update_requires(record)
        module = modules.setdefault(record.name, js.Toplevel(body=[], start_line=1))
        module.body.extend(record.function.body)
    return modules
