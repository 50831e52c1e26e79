import asyncio
import os
from typing import List, Optional

from pydantic import BaseModel

from jsbundle.assembler import extract_modules
from jsbundle.config import UnbundleOptions
from jsbundle.decompress import decompress
from jsbundle.diagnostics import debug_log, log
from jsbundle.errors import StructuralError
from jsbundle.kernel import find_main_function, unpack_kernel
from jsbundle.package import build_descriptor, resolve_dependency_versions, write_package_json
from jsbundle.parser import parse
from jsbundle.printer import print_to_string
from jsbundle.resolver import extract_module_names
from jsbundle.scope import figure_out_scope


class UnbundleResult(BaseModel):
    """What a run extracted and where it went."""
    modules: List[str]
    written: List[str]
    warnings: List[str]
    dependencies: List[str]
    package_json: Optional[str] = None


def parse_file(filename):
    """Read, parse and scope a JavaScript file."""
    with open(filename, 'r', encoding='utf-8') as f:
        source = f.read()
    debug_log(f"Parsing {filename} ({len(source)} characters)")
    return figure_out_scope(parse(source, filename))


def output_code(tree, filename=None, options=None):
    """Print ``tree``; to stdout without a filename, otherwise into the file (directories included)."""
    code = print_to_string(tree, options)
    if filename is None:
        print(code)
        return None
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filename, 'w', encoding='utf-8') as f:
        f.write(code)
        f.write('\n')
    return filename


async def output_code_async(tree, filename, options):
    """Async wrapper for concurrent writes."""
    return await asyncio.to_thread(output_code, tree, filename, options)


def write_modules(modules, output_directory, options=None):
    """
    Write every ``{name: tree}`` module to ``<output_directory>/<name>.js``
    concurrently. The first failed write is raised.
    """
    async def gather_writes():
        tasks = []
        for name, tree in modules.items():
            filename = os.path.join(output_directory, f'{name}.js')
            log(f"Writing {filename}")
            tasks.append(output_code_async(tree, filename, options))
        return await asyncio.gather(*tasks)

    return list(asyncio.run(gather_writes()))


def unbrowserify(filename, output_directory, options=None):
    options = options or UnbundleOptions()

    # STEP 1: PARSE
    toplevel = parse_file(filename)

    # STEP 2: FIND THE KERNEL
    kernel = find_main_function(toplevel, filename)
    if kernel is None:
        raise StructuralError(
            "Unable to find the bundle kernel",
            filename=filename,
            suggestion="A browserify bundle is a single top-level call taking the module map",
        )
    module_map, main = unpack_kernel(kernel, filename)

    # STEP 3: NAME AND ASSEMBLE THE MODULES
    names = extract_module_names(module_map, main, options.entry_names, filename)
    debug_log(f"Resolved {len(names)} module name(s)")
    dependencies = set()
    modules = extract_modules(module_map, names, dependencies, filename)

    # STEP 4: NORMALISE
    for name, tree in modules.items():
        debug_log(f"Normalising {name}")
        decompress(tree, options.decompress)

    # STEP 5: LOOK UP DEPENDENCY VERSIONS
    # Done before writing so a failed lookup leaves no partial output
    versions = None
    if options.write_package:
        versions = resolve_dependency_versions(dependencies, options.registry_url, options.request_timeout)

    # STEP 6: WRITE
    written = write_modules(modules, output_directory, options.output)

    package_json = None
    if options.write_package:
        descriptor = build_descriptor(
            os.path.basename(filename),
            [os.path.join(output_directory, f'{name}.js') for name in names.entry_names],
            versions,
        )
        package_json = os.path.abspath(options.package_path)
        log(f"Writing {package_json}")
        write_package_json(descriptor, package_json)

    return UnbundleResult(
        modules=list(modules),
        written=written,
        warnings=list(names.warnings),
        dependencies=sorted(dependencies),
        package_json=package_json,
    )
