"""
Command-line interface for the OTLP payload validator.

Provides commands for:
- Validating OTLP/JSON files (or stdin)
- Generating sample payloads with the OpenTelemetry SDK
- Inspecting the structural schemas
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .api import handle_validate_request
from .config import ConfigError, load_settings
from .generators.sample_generator import SampleGenerator
from .result import PayloadType
from .schemas.registry import describe_schemas
from .validators.otlp_validator import OtlpValidator

_DEFAULT_CONTENT_TYPE = "application/json"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="otlpcheck",
        description="Validate OTLP/JSON traces, logs and metrics export requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate a payload file
  otlpcheck validate traces.json

  # Validate from stdin and print the HTTP-style JSON response
  cat logs.json | otlpcheck validate - --json

  # Generate a sample metrics payload
  otlpcheck sample metrics --output metrics.json

  # Show the structural schema summary
  otlpcheck schema
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to otlpcheck YAML config (default: OTLPCHECK_CONFIG or ./otlpcheck.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    validate_parser = subparsers.add_parser("validate", help="Validate OTLP/JSON payload files")
    validate_parser.add_argument(
        "paths",
        nargs="+",
        metavar="PATH",
        help="Payload file(s) to validate; use - for stdin",
    )
    validate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the HTTP-style JSON response instead of a report",
    )
    validate_parser.add_argument(
        "--content-type",
        type=str,
        default=_DEFAULT_CONTENT_TYPE,
        help=f"Content type to validate the body as (default: {_DEFAULT_CONTENT_TYPE})",
    )

    sample_parser = subparsers.add_parser("sample", help="Generate a sample OTLP/JSON payload")
    sample_parser.add_argument(
        "signal",
        choices=[t.value for t in PayloadType],
        help="Signal to generate",
    )
    sample_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the payload to this file instead of stdout",
    )
    sample_parser.add_argument(
        "--service-name",
        type=str,
        default="otlpcheck-sample",
        help="service.name resource attribute (default: otlpcheck-sample)",
    )

    subparsers.add_parser("schema", help="Show structural schema summary")

    return parser


def _read_body(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def cmd_validate(args: argparse.Namespace, validator: OtlpValidator) -> int:
    """Validate each path; return 0 only if every payload is valid."""
    all_valid = True
    for path in args.paths:
        try:
            body = _read_body(path)
        except OSError as e:
            print(f"{path}: cannot read file: {e}", file=sys.stderr)
            all_valid = False
            continue

        response = handle_validate_request("POST", args.content_type, body, validator=validator)
        all_valid = all_valid and response.status == 200

        if args.json:
            print(response.json())
            continue

        label = "stdin" if path == "-" else path
        if response.result is not None:
            print(f"{label}: {response.result}\n")
            continue

        # Request-level failure: the body never reached the validator.
        for err in (response.body or {}).get("errors", []):
            print(f"❌ {label}: HTTP {response.status} [{err['keyword']}] {err['message']}")
    return 0 if all_valid else 1


def cmd_sample(args: argparse.Namespace) -> int:
    """Generate a sample payload."""
    generator = SampleGenerator(service_name=args.service_name)
    payload = generator.generate(PayloadType(args.signal))
    text = json.dumps(payload, indent=2)
    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {args.signal} sample to {output}")
    else:
        print(text)
    return 0


def cmd_schema(args: argparse.Namespace) -> int:
    """Show structural schema summary."""
    print("Structural schemas:")
    for signal, summary in describe_schemas().items():
        print(f"  - {signal} (root: {summary['root']})")
        print(f"    Definitions: {', '.join(summary['definitions'])}")
    return 0


def main(argv: list[str] | None = None):
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate":
        code = cmd_validate(args, OtlpValidator(settings=settings))
    elif args.command == "sample":
        code = cmd_sample(args)
    elif args.command == "schema":
        code = cmd_schema(args)
    else:
        parser.print_help()
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
