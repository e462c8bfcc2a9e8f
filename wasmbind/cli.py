"""
Command line interface for the binding compiler.

Usage:
    wasmbind parse hako.wasm hako.h hako-bindings.json
    wasmbind parse --dump hako.objdump.txt hako.wasm hako.h bindings.json
    wasmbind generate csharp hako-bindings.json HakoRegistry.generated.cs
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from . import descriptor_io, toolchain
from .config import BindgenConfig, load_config
from .dump_parser import DumpParser
from .errors import BindgenError, InputError
from .generators import generate, supported_languages
from .header_parser import HeaderParser
from .merger import create_descriptor
from .structured_logging import configure_structured_logging, phase_context

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wasmbind",
        description="Generate typed host bindings for a WebAssembly module",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  wasmbind parse hako.wasm hako.h bindings.json\n"
            "  wasmbind generate csharp bindings.json HakoRegistry.generated.cs\n"
        ),
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Path to a YAML config file")
    sub = parser.add_subparsers(dest="command", required=True)

    parse_cmd = sub.add_parser(
        "parse", parents=[common], help="Parse module and header into a descriptor"
    )
    parse_cmd.add_argument("wasm_file", nargs="?", default="hako.wasm", help="Module file")
    parse_cmd.add_argument("header_file", nargs="?", default="hako.h", help="Annotated header")
    parse_cmd.add_argument(
        "json_output", nargs="?", default="hako-bindings.json", help="Descriptor output path"
    )
    parse_cmd.add_argument(
        "--dump", default=None,
        help="Read the introspection dump from this file instead of running wasm-objdump",
    )
    parse_cmd.add_argument(
        "--version-string", default=None,
        help="Version to record (default: git describe)",
    )

    gen_cmd = sub.add_parser(
        "generate", parents=[common], help="Generate source code from a descriptor"
    )
    gen_cmd.add_argument("language", help=f"Target language ({', '.join(supported_languages())})")
    gen_cmd.add_argument("json_file", help="Descriptor produced by 'parse'")
    gen_cmd.add_argument("output_file", help="Generated source output path")

    return parser


def read_input(path: str) -> str:
    """Read a UTF-8 text input"""
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InputError(f"{path} is not valid UTF-8: {exc}") from exc


def run_parse(args: argparse.Namespace, config: BindgenConfig) -> int:
    """Phase 1: dump + header -> binding descriptor"""
    version = args.version_string
    if version is None:
        version = toolchain.describe_version(git=config.toolchain.git)

    print("Parse mode")
    print(f"  WASM: {args.wasm_file}")
    print(f"  Header: {args.header_file}")
    print(f"  Output: {args.json_output}")
    print(f"  Version: {version}")

    if args.dump:
        dump_text = read_input(args.dump)
    else:
        dump_text = toolchain.run_objdump(args.wasm_file, objdump=config.toolchain.objdump)

    dump = DumpParser(dump_text, reserved_exports=config.parse.reserved_exports).parse()
    print(f"  Found {len(dump.types)} types")
    print(f"  Found {len(dump.imports)} imports")
    print(f"  Found {len(dump.exports)} exports")

    header_text = read_input(args.header_file)
    header_functions = HeaderParser(
        header_text,
        export_macro=config.parse.export_macro,
        doc_marker=config.parse.doc_marker,
    ).parse()
    logger.info("Recovered %d annotated header declarations", len(header_functions))

    descriptor = create_descriptor(
        version, dump.types, dump.imports, dump.exports, header_functions
    )
    descriptor_io.save(descriptor, args.json_output)
    print(f"Generated {args.json_output}")
    return 0


def run_generate(args: argparse.Namespace, config: BindgenConfig) -> int:
    """Phase 2: descriptor -> target source"""
    print("Generate mode")
    print(f"  Language: {args.language}")
    print(f"  Input: {args.json_file}")
    print(f"  Output: {args.output_file}")

    descriptor = descriptor_io.load(args.json_file)
    code = generate(args.language, descriptor, config)
    descriptor_io.write_text_atomic(args.output_file, code)
    print(f"Generated {args.output_file}")
    return 0


COMMANDS = {
    "parse": run_parse,
    "generate": run_generate,
}


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    start_time = time.perf_counter()

    try:
        config = load_config(args.config)
        configure_structured_logging(config.log_level_value)
        with phase_context(args.command):
            status = COMMANDS[args.command](args, config)
    except (BindgenError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    elapsed = time.perf_counter() - start_time
    logger.info("%s completed in %.2f ms", args.command, elapsed * 1000)
    return status


if __name__ == "__main__":
    sys.exit(main())
