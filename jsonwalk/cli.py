"""Command line interface for jsonwalk."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import ToolkitConfig, load_config
from .diff_export import (
    calculate_similarity_score,
    export_diff_as_csv,
    export_diff_as_json,
    filter_differences,
    generate_diff_summary,
    generate_unified_diff,
)
from .differ import compare_json
from .env_converter import convert_properties
from .exceptions import InputFormatError, JsonWalkError
from .flattener import convert_from_csv, convert_to_csv, flatten_json, unflatten_json
from .json_utils import minify_json, parse_json, pretty_print_json, validate_json
from .jsonpath import ExtendedPathEvaluator, evaluate_json_path, get_json_path_suggestions, validate_json_path
from .log import setup_logging
from .models import ArrayNotation, ConversionMode, DiffType, FlattenOptions, SchemaOptions
from .protobuf import convert_interface_to_getters, convert_record_to_proto
from .schema_generator import generate_json_schema
from .sql_placeholder import fill_placeholders, split_sql_and_log
from .stats import analyze_json_stats, generate_stats_report

logger = logging.getLogger(__name__)


def read_input(source: str) -> str:
    """Read a file path, or stdin when the path is "-"."""
    if source == "-":
        return sys.stdin.read()

    path = Path(source)
    if not path.exists():
        raise InputFormatError(f"File not found: {source}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise InputFormatError(f"File is not valid UTF-8: {source} ({e.reason})") from e


def _dump(value, config: ToolkitConfig) -> str:
    return json.dumps(value, indent=config.indent, ensure_ascii=False)


def _flatten_options(args, config: ToolkitConfig) -> FlattenOptions:
    defaults = config.flatten_options()
    return FlattenOptions(
        separator=args.separator or defaults.separator,
        array_notation=ArrayNotation(args.notation) if args.notation else defaults.array_notation,
        preserve_arrays=getattr(args, "preserve_arrays", False) or defaults.preserve_arrays,
    )


def cmd_format(args, config: ToolkitConfig) -> int:
    indent = args.indent if args.indent is not None else config.indent
    print(pretty_print_json(read_input(args.input), indent=indent))
    return 0


def cmd_minify(args, config: ToolkitConfig) -> int:
    print(minify_json(read_input(args.input)))
    return 0


def cmd_validate(args, config: ToolkitConfig) -> int:
    result = validate_json(read_input(args.input))
    if result.is_valid:
        print("Valid JSON")
        return 0

    for error in result.errors:
        print(f"{args.input}:{error.line}:{error.column}: {error.message}", file=sys.stderr)
    return 1


def cmd_diff(args, config: ToolkitConfig) -> int:
    left = parse_json(read_input(args.left))
    right = parse_json(read_input(args.right))
    differences = compare_json(left, right)
    shown = filter_differences(differences, show_unchanged=args.show_unchanged)

    if args.format == "json":
        print(export_diff_as_json(shown))
    elif args.format == "csv":
        print(export_diff_as_csv(shown))
    elif args.format == "unified":
        print(generate_unified_diff(shown), end="")
    else:
        for diff in shown:
            print(f"{diff.type.value:<9} {diff.path}  {diff.message or ''}".rstrip())
        summary = generate_diff_summary(differences)
        print(
            f"\n{summary.added} added, {summary.removed} removed, {summary.modified} modified; "
            f"similarity {calculate_similarity_score(differences)}%"
        )

    has_changes = any(d.type != DiffType.UNCHANGED for d in differences)
    return 1 if args.exit_code and has_changes else 0


def cmd_flatten(args, config: ToolkitConfig) -> int:
    options = _flatten_options(args, config)
    flattened = flatten_json(parse_json(read_input(args.input)), options)
    if args.csv:
        print(convert_to_csv(flattened))
    else:
        print(_dump(flattened, config))
    return 0


def cmd_unflatten(args, config: ToolkitConfig) -> int:
    options = _flatten_options(args, config)
    text = read_input(args.input)
    flattened = convert_from_csv(text) if args.csv else parse_json(text)
    if not isinstance(flattened, dict):
        raise InputFormatError("Flattened input must be a JSON object")
    print(_dump(unflatten_json(flattened, options), config))
    return 0


def cmd_schema(args, config: ToolkitConfig) -> int:
    defaults = config.schema_options()
    options = SchemaOptions(
        required=args.required or defaults.required,
        additional_properties=defaults.additional_properties and not args.no_additional_properties,
        generate_examples=args.examples or defaults.generate_examples,
        generate_descriptions=args.descriptions or defaults.generate_descriptions,
    )
    print(_dump(generate_json_schema(parse_json(read_input(args.input)), options), config))
    return 0


def cmd_query(args, config: ToolkitConfig) -> int:
    document = parse_json(read_input(args.input))

    if args.extended:
        results = ExtendedPathEvaluator.find_all(document, args.expression)
    else:
        validation = validate_json_path(args.expression)
        if not validation.valid:
            print(f"Error: {validation.error}", file=sys.stderr)
            return 1
        results = evaluate_json_path(document, args.expression)

    if args.values:
        print(_dump([r.value for r in results], config))
    else:
        print(_dump([r.to_dict() for r in results], config))
    return 0


def cmd_suggest(args, config: ToolkitConfig) -> int:
    limit = args.limit or config.suggestion_limit
    for suggestion in get_json_path_suggestions(parse_json(read_input(args.input)), limit):
        print(suggestion)
    return 0


def cmd_stats(args, config: ToolkitConfig) -> int:
    stats = analyze_json_stats(parse_json(read_input(args.input)))
    if args.json:
        print(_dump(stats.to_dict(), config))
    else:
        print(generate_stats_report(stats))
    return 0


def cmd_convert(args, config: ToolkitConfig) -> int:
    output = convert_properties(read_input(args.input), args.mode)
    if output:
        print(output)
    return 0


def cmd_proto(args, config: ToolkitConfig) -> int:
    text = read_input(args.input)
    if args.interface:
        print(convert_interface_to_getters(text))
    else:
        print(convert_record_to_proto(text))
    return 0


def cmd_sql(args, config: ToolkitConfig) -> int:
    sql_query, log = split_sql_and_log(read_input(args.input))
    if not log:
        print("Error: no Hibernate binding log found in input", file=sys.stderr)
        return 1

    filled = fill_placeholders(sql_query, log)
    if not filled:
        print("Error: failed to fill SQL placeholders", file=sys.stderr)
        return 1

    print(filled)
    return 0


def _add_flatten_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--separator", help="Key separator (default from config, '.')")
    parser.add_argument(
        "--notation",
        choices=[n.value for n in ArrayNotation],
        help="Array index notation"
    )
    parser.add_argument("--csv", action="store_true", help="Use Key/Value/Type CSV")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonwalk",
        description="Inspect, transform and compare JSON documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jsonwalk flatten data.json
  jsonwalk diff old.json new.json --format unified
  jsonwalk query data.json '$.store.book[*].title'
  cat application.yaml | jsonwalk convert - --mode yaml-to-k8s-env
        """
    )
    parser.add_argument("-c", "--config", help="Path to YAML/JSON config file")
    parser.add_argument("--log-level", help="Log level (overrides config)")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("format", help="Pretty-print JSON")
    p.add_argument("input", help="JSON file, or - for stdin")
    p.add_argument("--indent", type=int, help="Indent width")
    p.set_defaults(handler=cmd_format)

    p = subparsers.add_parser("minify", help="Print compact JSON")
    p.add_argument("input", help="JSON file, or - for stdin")
    p.set_defaults(handler=cmd_minify)

    p = subparsers.add_parser("validate", help="Check JSON syntax")
    p.add_argument("input", help="JSON file, or - for stdin")
    p.set_defaults(handler=cmd_validate)

    p = subparsers.add_parser("diff", help="Structural diff of two JSON documents")
    p.add_argument("left", help="Baseline JSON file")
    p.add_argument("right", help="New JSON file")
    p.add_argument(
        "--format",
        choices=["text", "json", "csv", "unified"],
        default="text",
        help="Output format"
    )
    p.add_argument("--show-unchanged", action="store_true", help="Include unchanged values")
    p.add_argument("--exit-code", action="store_true", help="Exit with 1 when documents differ")
    p.set_defaults(handler=cmd_diff)

    p = subparsers.add_parser("flatten", help="Flatten nested JSON to path keys")
    p.add_argument("input", help="JSON file, or - for stdin")
    _add_flatten_arguments(p)
    p.add_argument("--preserve-arrays", action="store_true", help="Keep arrays as leaf values")
    p.set_defaults(handler=cmd_flatten)

    p = subparsers.add_parser("unflatten", help="Rebuild nested JSON from path keys")
    p.add_argument("input", help="Flat JSON object or CSV file, or - for stdin")
    _add_flatten_arguments(p)
    p.set_defaults(handler=cmd_unflatten)

    p = subparsers.add_parser("schema", help="Infer a JSON Schema from a sample")
    p.add_argument("input", help="JSON file, or - for stdin")
    p.add_argument("--required", action="store_true", help="Mark non-null properties required")
    p.add_argument("--examples", action="store_true", help="Include examples")
    p.add_argument("--descriptions", action="store_true", help="Include descriptions")
    p.add_argument(
        "--no-additional-properties",
        action="store_true",
        help="Set additionalProperties to false"
    )
    p.set_defaults(handler=cmd_schema)

    p = subparsers.add_parser("query", help="Evaluate a JSONPath expression")
    p.add_argument("input", help="JSON file, or - for stdin")
    p.add_argument("expression", help="Path expression, e.g. '$.store.book[*].title'")
    p.add_argument("--extended", action="store_true", help="Full JSONPath (filters, slices, unions)")
    p.add_argument("--values", action="store_true", help="Print matched values only")
    p.set_defaults(handler=cmd_query)

    p = subparsers.add_parser("suggest", help="List candidate path expressions")
    p.add_argument("input", help="JSON file, or - for stdin")
    p.add_argument("--limit", type=int, help="Maximum number of collected paths")
    p.set_defaults(handler=cmd_suggest)

    p = subparsers.add_parser("stats", help="Structural statistics")
    p.add_argument("input", help="JSON file, or - for stdin")
    p.add_argument("--json", action="store_true", help="Print statistics as JSON")
    p.set_defaults(handler=cmd_stats)

    p = subparsers.add_parser("convert", help="Convert YAML/properties/Spring sources")
    p.add_argument("input", help="Input file, or - for stdin")
    p.add_argument(
        "-m", "--mode",
        choices=[m.value for m in ConversionMode],
        default=ConversionMode.YAML_TO_ENV.value,
        help="Conversion mode"
    )
    p.set_defaults(handler=cmd_convert)

    p = subparsers.add_parser("proto", help="Convert a Java record to a proto3 message")
    p.add_argument("input", help="Java source file, or - for stdin")
    p.add_argument("--interface", action="store_true", help="Add getX() defaults to an interface instead")
    p.set_defaults(handler=cmd_proto)

    p = subparsers.add_parser("sql", help="Fill JDBC placeholders from a Hibernate bind log")
    p.add_argument("input", help="SQL followed by its bind log, or - for stdin")
    p.set_defaults(handler=cmd_sql)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else ToolkitConfig()
    except JsonWalkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        setup_logging(args.log_level or config.log_level, json_format=args.log_json or config.log_json)
    except ValueError as e:
        parser.error(str(e))

    logger.debug("Running %s with config %s", args.command, config.to_dict())
    try:
        return args.handler(args, config)
    except JsonWalkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
