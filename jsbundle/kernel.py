"""
Bundle kernel matching.

A browserify bundle is a single top-level call of the prelude function:

    (function e(t, n, r) { ... })({1: [function (require, module, exports) {...}, {"./dep": 2}], ...}, {}, [1])

The three arguments are the module map, the module cache (unused here) and
the list of entry module ids.
"""
from . import nodes as js
from .errors import AmbiguousKernelError, StructuralError


def find_main_function(toplevel, filename=None):
    """
    Return the single top-level call, or None if there is none.

    The walk does not look inside nested functions, and does not look
    inside a call once it has matched, so calls in the kernel's own
    arguments are never counted.
    """
    found = []

    def visit(node, descend):
        if isinstance(node, js.Call):
            if found:
                raise AmbiguousKernelError(
                    "Found more than one top-level call; cannot tell which one is the bundle kernel",
                    filename=filename,
                    line_number=node.start_line,
                    suggestion=f"The first candidate starts at line {found[0].start_line}",
                )
            found.append(node)
            return True
        return isinstance(node, js.Lambda)

    walker = js.TreeWalker(visit)
    for statement in toplevel.body:
        walker.walk(statement)
    return found[0] if found else None


def unpack_kernel(call, filename=None):
    """Split the kernel call into its module map object and its entry id array."""
    if len(call.args) < 3:
        raise StructuralError(
            f"Bundle kernel takes {len(call.args)} argument(s), expected 3",
            filename=filename,
            line_number=call.start_line,
            suggestion="Is this a browserify bundle?",
        )
    module_map, _, main = call.args[:3]
    if not isinstance(module_map, js.Object):
        raise StructuralError(
            "Malformed module map: the first kernel argument should be an object literal",
            filename=filename,
            line_number=module_map.start_line or call.start_line,
        )
    if not isinstance(main, js.Array):
        raise StructuralError(
            "Malformed entry list: the third kernel argument should be an array literal",
            filename=filename,
            line_number=main.start_line or call.start_line,
        )
    return module_map, main
