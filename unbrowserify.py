import argparse
import sys

from extractor import unbrowserify
from jsbundle.config import REGISTRY_URL, DecompressOptions, UnbundleOptions
from jsbundle.diagnostics import log, set_verbose, warn
from jsbundle.errors import UnbrowserifyError


def options_from_args(args):
    return UnbundleOptions(
        decompress=DecompressOptions(
            constants=not args.no_constants,
            sequences=not args.no_sequences,
            conditionals=not args.no_conditionals,
        ),
        write_package=not args.no_package,
        registry_url=args.registry,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Split a browserify bundle back into its modules")
    parser.add_argument("input", help="Bundle file to unpack")
    parser.add_argument("output", help="Directory the modules are written to")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--no-constants", action="store_true", help="Keep 0/0, 1/0, !0 and !1 as written")
    parser.add_argument("--no-sequences", action="store_true", help="Keep comma sequences in statement positions")
    parser.add_argument("--no-conditionals", action="store_true", help="Keep && / || / ?: statements as written")
    parser.add_argument("--no-package", action="store_true", help="Do not write package.json in the working directory")
    parser.add_argument("--registry", default=REGISTRY_URL, help=f"Package registry (default: {REGISTRY_URL})")

    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    try:
        result = unbrowserify(args.input, args.output, options_from_args(args))
    except (UnbrowserifyError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    log(f"Extracted {len(result.modules)} module(s) into {args.output}")
    if result.warnings:
        warn(f"{len(result.warnings)} naming conflict(s); see the warnings above")
    return 0


if __name__ == "__main__":
    main()
