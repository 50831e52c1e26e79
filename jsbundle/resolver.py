"""
Module name resolution.

Browserify replaces file names by numeric ids. The only evidence of the
original names is each module's require map (``{"./fib": 1}``), so names
spread outwards from the entry modules: once a module has a name, every
module it requires can be named relative to it.
"""
import posixpath
from enum import Enum

from . import nodes as js
from .config import ENTRY_NAMES
from .diagnostics import debug_log, warn
from .errors import StructuralError, UnresolvedModuleError

EXTERNAL_ROOT = 'node_modules'
STRIPPED_EXTENSIONS = ('.js', '.json')

# Node.js core modules; browserify replaces these with shims that are not worth extracting
BUILTIN_MODULES = frozenset([
    'assert', 'async_hooks', 'buffer', 'child_process', 'cluster', 'console', 'constants',
    'crypto', 'dgram', 'diagnostics_channel', 'dns', 'domain', 'events', 'fs', 'http',
    'http2', 'https', 'inspector', 'module', 'net', 'os', 'path', 'perf_hooks', 'process',
    'punycode', 'querystring', 'readline', 'repl', 'stream', 'string_decoder', 'sys',
    'timers', 'tls', 'trace_events', 'tty', 'url', 'util', 'v8', 'vm', 'wasi',
    'worker_threads', 'zlib',
])


class ModuleKind(str, Enum):
    LOCAL = 'local'
    BUILTIN = 'builtin'
    DEPENDENCY = 'dependency'


def module_id(node):
    """The module id written by an id literal, or None for anything else."""
    if isinstance(node, js.Number):
        value = node.value
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value)
    if isinstance(node, js.String):
        return node.value
    return None


def strip_extension(name):
    for extension in STRIPPED_EXTENSIONS:
        if name.endswith(extension):
            return name[:-len(extension)]
    return name


def candidate_name(parent_name, specifier):
    """Name implied for the module that ``parent_name`` loads with ``require(specifier)``."""
    if specifier.startswith('.'):
        name = posixpath.normpath(posixpath.join(posixpath.dirname(parent_name), specifier))
        if specifier in ('.', '..') or specifier.endswith('/') or name in ('.', '..') or name.endswith('/..'):
            name = posixpath.join(name, 'index')
        return strip_extension(name)
    return strip_extension(posixpath.join(EXTERNAL_ROOT, specifier, 'index'))


def package_name(name):
    """The npm package a resolved name lives in, or None for local modules."""
    parts = name.split('/')
    if len(parts) < 2 or parts[0] != EXTERNAL_ROOT:
        return None
    package = parts[1]
    if package.startswith('@') and len(parts) > 2:
        package = f'{package}/{parts[2]}'
    return package


def is_builtin_module(package):
    if package.startswith('node:'):
        package = package[len('node:'):]
    return package.split('/')[0] in BUILTIN_MODULES


def classify_module(name):
    """Decide whether a resolved module is extracted, dropped as a builtin, or declared as a dependency."""
    package = package_name(name)
    if package is None:
        return ModuleKind.LOCAL
    if is_builtin_module(package):
        return ModuleKind.BUILTIN
    # Published package names are lowercase; anything else is most likely a vendored copy
    if package == package.lower():
        return ModuleKind.DEPENDENCY
    return ModuleKind.LOCAL


def entry_name(index, entry_names=ENTRY_NAMES):
    if index < len(entry_names):
        return entry_names[index]
    return f'entry{index}'


class NameTable:
    """
    Module id to resolved name.

    The first name assigned to an id wins. Conflicting evidence is kept as
    a warning; the only rename allowed is moving an id to ``<shorter>/index``.
    """

    def __init__(self):
        self._names = {}
        self.entry_names = []
        self.warnings = []

    def __getitem__(self, module_id):
        return self._names[module_id]

    def __len__(self):
        return len(self._names)

    def get(self, module_id, default=None):
        return self._names.get(module_id, default)

    def as_dict(self):
        return dict(self._names)

    def seed(self, module_id, name):
        """Give an entry module its reserved name."""
        if module_id in self._names:
            return
        self._names[module_id] = name
        self.entry_names.append(name)

    def propose(self, module_id, candidate):
        """Record require-site evidence that ``module_id`` is called ``candidate``."""
        existing = self._names.get(module_id)
        if existing is None:
            self._names[module_id] = candidate
            debug_log(f"Module {module_id} is {candidate}")
            return
        if existing.lower() == candidate.lower() or existing == f'{candidate}/index':
            return
        # Only the name already assigned can move to <candidate>/index, so the outcome
        # depends on which require site is seen first
        if len(existing) <= len(candidate):
            self._warn(f"Module {module_id} is required as both {existing} and {candidate}; keeping {existing}")
            return
        renamed = f'{candidate}/index'
        self._warn(f"Module {module_id} is required as both {existing} and {candidate}; renaming it to {renamed}")
        self._names[module_id] = renamed

    def _warn(self, message):
        self.warnings.append(message)
        warn(message)


def module_entries(module_map, filename=None):
    """Validate the module map and return ``{id: (function, require_map)}`` in source order."""
    entries = {}
    for prop in module_map.properties:
        if not isinstance(prop, js.ObjectKeyVal):
            raise StructuralError(
                "Malformed module map: accessors are not allowed",
                filename=filename,
                line_number=prop.start_line,
            )
        value = prop.value
        if not (isinstance(value, js.Array) and len(value.elements) >= 2
                and isinstance(value.elements[0], js.Function)):
            raise StructuralError(
                f"Malformed module map entry {prop.key!r}: expected [function, require map]",
                filename=filename,
                line_number=prop.start_line,
            )
        function, require_map = value.elements[:2]
        if not isinstance(require_map, js.Object):
            raise StructuralError(
                f"Module {prop.key!r} has no require map",
                filename=filename,
                line_number=value.start_line,
                suggestion="The second element of every module map entry must be an object literal",
            )
        entries[prop.key] = (function, require_map)
    return entries


def require_edges(require_map):
    """Yield ``(specifier, target_id)`` pairs of a module's require map."""
    for prop in require_map.properties:
        target = module_id(prop.value) if isinstance(prop, js.ObjectKeyVal) else None
        if target is None:
            # browserify writes undefined for modules excluded from the bundle
            debug_log(f"Skipping require of {prop.key!r}: no module id")
            continue
        yield prop.key, target


def extract_module_names(module_map, main, entry_names=ENTRY_NAMES, filename=None):
    """
    Name every module reachable from the entry ids.

    Modules are processed in passes; a module whose name is not known yet is
    deferred to the next pass. Resolution stops when a pass names no module
    at all, leaving unreachable modules out of the table.
    """
    entries = module_entries(module_map, filename)
    names = NameTable()
    for index, element in enumerate(main.elements):
        entry_id = module_id(element)
        if entry_id is None:
            raise StructuralError(
                "Malformed entry list: entries should be numbers or strings",
                filename=filename,
                line_number=element.start_line,
            )
        names.seed(entry_id, entry_name(index, entry_names))

    pending = list(entries)
    while pending:
        deferred = []
        processed = 0
        for current in pending:
            name = names.get(current)
            if name is None:
                deferred.append(current)
                continue
            processed += 1
            for specifier, target in require_edges(entries[current][1]):
                if target not in entries:
                    raise UnresolvedModuleError(
                        f"Module {name} requires {specifier!r} as module {target}, which is not in the bundle",
                        filename=filename,
                        line_number=entries[current][1].start_line,
                    )
                names.propose(target, candidate_name(name, specifier))
        if not processed:
            for module in deferred:
                debug_log(f"Module {module} is never required; leaving it unnamed")
            break
        pending = deferred
    return names
