#!/usr/bin/env python3
"""Command line entry point.

    xmlgraph analyze doc.xml [--rules rules.yaml] [--default-mapping]
    xmlgraph validate mapping.yaml schema.json [--required]
    xmlgraph convert doc.xml --mapping mapping.yaml --schema schema.json [--two-pass]

Results are written as JSON to stdout (or --out); logs go to stderr. The
exit code is 1 when the command reports errors.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from .core.config import ConversionConfig
from .core.errors import XmlGraphError
from .core.logging import setup_logging
from .services.domain.mapping import load_mapping, load_rules, load_schema, validate, validate_required_properties
from .services.domain.xml_analysis import analyze_structure, generate_default_mapping, get_default_analysis_rules
from .services.domain.xml_to_graph import convert_xml_to_graph

logger = logging.getLogger(__name__)


def _emit(data: Any, out: str | None, indent: int):
    pretty = json.dumps(data, indent=indent or None, ensure_ascii=False)
    if out:
        Path(out).write_text(pretty + "\n", encoding="utf-8")
        logger.info(f"Wrote {out}")
    else:
        print(pretty)  # noqa: T201


def _read_xml(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise XmlGraphError(f"Cannot read XML file {path}: {e.strerror or e}") from e


def cmd_analyze(args, config: ConversionConfig) -> int:
    rules = load_rules(args.rules) if args.rules else get_default_analysis_rules()
    extra = [name for name in config.IGNORED_ELEMENTS if name not in rules.ignored_elements]
    if extra:
        rules.ignored_elements = rules.ignored_elements + extra
    analysis = analyze_structure(_read_xml(args.xml), rules)
    if args.default_mapping:
        _emit(generate_default_mapping(analysis).to_json_dict(), args.out, config.JSON_INDENT)
    else:
        _emit(analysis.to_json_dict(), args.out, config.JSON_INDENT)
    return 0


def cmd_validate(args, config: ConversionConfig) -> int:
    mapping = load_mapping(args.mapping)
    schema = load_schema(args.schema)

    errors = validate(mapping, schema)
    report: dict[str, Any] = {"errors": [e.to_json_dict() for e in errors]}
    if args.required:
        # Advisory only; does not change the exit code
        report["requiredPropertyErrors"] = [e.to_json_dict() for e in validate_required_properties(mapping, schema)]

    _emit(report, args.out, config.JSON_INDENT)
    return 1 if errors else 0


def cmd_convert(args, config: ConversionConfig) -> int:
    mapping = load_mapping(args.mapping)
    schema = load_schema(args.schema)

    options = config.get_conversion_options()
    if args.two_pass:
        options = replace(options, resolve_forward_references=True)
    if args.max_elements is not None:
        options = replace(options, max_elements=args.max_elements)

    result = convert_xml_to_graph(_read_xml(args.xml), schema, mapping, options)
    _emit(result.to_json_dict(), args.out, config.JSON_INDENT)
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="xmlgraph", description="Analyze XML and convert it to a property graph")
    ap.add_argument("--log-level", help="Override XMLGRAPH_LOG_LEVEL")
    sub = ap.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Infer element types, attributes and relationship patterns")
    analyze.add_argument("xml")
    analyze.add_argument("--rules", help="Analysis rules file (YAML or JSON)")
    analyze.add_argument("--default-mapping", action="store_true", help="Print a default mapping instead")
    analyze.add_argument("--out", help="Write JSON to this path")
    analyze.set_defaults(func=cmd_analyze)

    check = sub.add_parser("validate", help="Validate a mapping against a schema")
    check.add_argument("mapping")
    check.add_argument("schema")
    check.add_argument("--required", action="store_true", help="Also report unmapped required properties")
    check.add_argument("--out", help="Write JSON to this path")
    check.set_defaults(func=cmd_validate)

    convert = sub.add_parser("convert", help="Convert an XML document into nodes and relationships")
    convert.add_argument("xml")
    convert.add_argument("--mapping", required=True)
    convert.add_argument("--schema", required=True)
    convert.add_argument("--two-pass", action="store_true", help="Resolve references to ids that appear later")
    convert.add_argument("--max-elements", type=int, help="Abort once more elements than this are visited")
    convert.add_argument("--out", help="Write JSON to this path")
    convert.set_defaults(func=cmd_convert)

    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = ConversionConfig()
    setup_logging(args.log_level or config.LOG_LEVEL)

    try:
        return args.func(args, config)
    except XmlGraphError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
