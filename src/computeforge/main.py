from __future__ import annotations

import argparse
import sys
from typing import Sequence

from computeforge import __version__
from computeforge.core.errors import main_with_error_handling
from computeforge.logging import configure_logging


def _add_parameter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--param",
        "-p",
        dest="params",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Provisioning parameter (repeatable)",
    )
    parser.add_argument("--params-file", "-f", help="YAML file with provisioning parameters")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="computeforge", description="Provision a compute instance stack")
    parser.add_argument("--version", action="version", version=f"computeforge {__version__}")
    parser.add_argument("--log-level", default="WARNING", help="Log level for structured logs")
    subparsers = parser.add_subparsers(dest="command")

    validate_parser = subparsers.add_parser("validate", help="Validate a parameter bag")
    _add_parameter_arguments(validate_parser)

    plan_parser = subparsers.add_parser("plan", help="Show the resource graph and apply order")
    _add_parameter_arguments(plan_parser)
    plan_parser.add_argument("--output", choices=["text", "json"], default="text", help="Output format")

    apply_parser = subparsers.add_parser("apply", help="Create missing resources")
    _add_parameter_arguments(apply_parser)
    apply_parser.add_argument(
        "--provider",
        help="Compute provider (default: COMPUTEFORGE_COMPUTE_PROVIDER)",
    )
    apply_parser.add_argument("--output", choices=["text", "json"], default="text", help="Output format")

    return parser


@main_with_error_handling()
def run(args: argparse.Namespace) -> int:
    if args.command == "validate":
        from computeforge.cli.validate import validate_command

        return validate_command(args.params, args.params_file)

    if args.command == "plan":
        from computeforge.cli.plan import plan_command

        return plan_command(args.params, args.params_file, output_format=args.output)

    if args.command == "apply":
        from computeforge.cli.apply import apply_command

        return apply_command(
            args.params,
            args.params_file,
            provider_name=args.provider,
            output_format=args.output,
        )

    return 0


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    configure_logging(args.log_level.upper(), json_output=False)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
