"""
CLI entry point for scribe.

Usage:
    python3 -m tools.scribe --server protocols/hello-world.xml
    python3 -m tools.scribe --client protocols/hello-world.xml --header gen/hello-world-client.hpp
"""

import argparse
import sys

from . import GENERATOR_NAME, __version__
from .config import (
    ARTIFACTS_BOTH,
    ARTIFACTS_HEADER,
    ARTIFACTS_SOURCE,
    GenerationOptions,
    parse_options_yaml,
    validate_options,
)
from .errors import ConfigError, ScribeError
from .generator import run
from .types import ROLE_CLIENT, ROLE_SERVER


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=GENERATOR_NAME,
        description="Generate C++ wrappers for a Wayland protocol")
    role = parser.add_mutually_exclusive_group(required=True)
    role.add_argument("--server", metavar="SPEC",
                      help="Generate the server-side wrapper code for SPEC")
    role.add_argument("--client", metavar="SPEC",
                      help="Generate the client-side wrapper code for SPEC")
    parser.add_argument("--header", action="store_true",
                        help="Generate only the header (with --source: both)")
    parser.add_argument("--source", action="store_true",
                        help="Generate only the source (with --header: both)")
    parser.add_argument("--header-path", metavar="PATH",
                        help="Path of the protocol's C header, used in #include <PATH/...>")
    parser.add_argument("--prefix",
                        help="Interface prefix to strip (overrides wl_/qt_)")
    parser.add_argument("--add-include", metavar="INCLUDE", action="append",
                        help="Extra #include (may be given more than once)")
    parser.add_argument("--config", metavar="FILE",
                        help="YAML file with default generation options")
    parser.add_argument("-v", "--version", action="version",
                        version=f"{GENERATOR_NAME} {__version__}")
    parser.add_argument("output", nargs="*",
                        help="Output file (or stem, when generating both)")
    return parser


def options_from_args(args: argparse.Namespace) -> GenerationOptions:
    """Merge the optional YAML config with the command line flags."""
    options = GenerationOptions()
    if args.config:
        try:
            with open(args.config, encoding="utf-8") as f:
                options = parse_options_yaml(f.read(), options)
        except OSError as e:
            raise ConfigError(f"Unable to read config {args.config}: {e.strerror}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Unable to read config {args.config}: {e.reason}")

    options.role = ROLE_SERVER if args.server else ROLE_CLIENT
    if args.header and not args.source:
        options.artifacts = ARTIFACTS_HEADER
    elif args.source and not args.header:
        options.artifacts = ARTIFACTS_SOURCE
    elif args.header and args.source:
        options.artifacts = ARTIFACTS_BOTH
    if args.header_path is not None:
        options.header_path = args.header_path
    if args.prefix is not None:
        options.prefix = args.prefix
    if args.add_include:
        options.includes = options.includes + args.add_include
    return validate_options(options)


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    if len(args.output) > 1:
        extra = " ".join(args.output[1:])
        print(f"[Warning]: Ignoring the extra argument(s): ({extra})", file=sys.stderr)
    output = args.output[0] if args.output else ""
    spec_path = args.server or args.client

    try:
        options = options_from_args(args)
        written = run(spec_path, options, output)
    except ScribeError as e:
        print(f"[Error]: {e}", file=sys.stderr)
        return 1

    for path in written:
        print(f"  wrote {path}")
    print(f"\nGenerated {len(written)} {options.role} file(s) from '{spec_path}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
