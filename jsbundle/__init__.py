# unbrowserify - browserify bundle components
"""
Modules for splitting browserify bundles:
- errors: Error hierarchy with file/line context
- diagnostics: stderr logging helpers
- config: Option models
- grammar / transformer / parser: Lark grammar and JavaScript syntax tree construction
- nodes: Syntax tree classes and walker
- scope: Symbol binding
- printer: Code generation
- kernel: Bundle kernel matching
- resolver: Module name resolution
- assembler: Per-module program assembly
- decompress: Normalisation of minified code
- package: package.json generation
- case_runner: Normalisation rule cases
"""

from .errors import UnbrowserifyError
from .parser import parse
from .printer import print_to_string
from .scope import figure_out_scope
from .kernel import find_main_function, unpack_kernel
from .resolver import extract_module_names
from .assembler import extract_modules
from .decompress import decompress

__all__ = [
    'UnbrowserifyError',
    'parse',
    'print_to_string',
    'figure_out_scope',
    'find_main_function',
    'unpack_kernel',
    'extract_module_names',
    'extract_modules',
    'decompress',
]
