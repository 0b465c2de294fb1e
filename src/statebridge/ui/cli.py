#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from statebridge.adapters.pulumi import JsonMappingLoader, TypeMapper
from statebridge.adapters.terraform import TerraformInventoryReader
from statebridge.app import (
    check_ledger,
    compute_diff,
    init_ledger_command,
    next_step_command,
    resolve_imports_command,
    set_association_command,
    skip_command,
    suggest_provider,
    suggest_resource,
    untrack_command,
)
from statebridge.config import ConfigurationError, configure_logging, get_cli_config
from statebridge.domain.errors import CollaboratorFailure, StateBridgeError

from .report import (
    format_check_report,
    format_diff_summary,
    format_import_report,
    format_init_report,
    format_mutation_report,
    format_next_step,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from statebridge.config import CliConfig

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="statebridge",
        description="Track a Terraform to Pulumi migration",
    )
    parser.add_argument(
        "--ledger",
        type=Path,
        help="Path to migration.json (defaults to STATEBRIDGE_LEDGER or ./migration.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Draft a ledger from a Terraform state file")
    init.add_argument("--group", required=True, help="Pulumi stack the state migrates to")
    init.add_argument("--tf-state", required=True, help="Terraform state file (.json or .tfstate)")
    init.add_argument("--tf-sources", required=True, help="Terraform sources directory")
    init.add_argument("--pulumi-sources", required=True, help="Pulumi project directory")
    init.add_argument("--project", help="Pulumi project name (defaults to Pulumi.yaml's name)")
    init.add_argument("--force", action="store_true", help="Overwrite an existing ledger")

    subparsers.add_parser("next", help="Suggest the next migration step")

    subparsers.add_parser("check", help="Run integrity checks on the ledger")

    set_association = subparsers.add_parser(
        "set-association", help="Associate a Terraform address with a Pulumi URN"
    )
    set_association.add_argument("--addr", required=True, help="Terraform resource address")
    set_association.add_argument("--urn", required=True, help="Pulumi URN to associate")
    _add_group_argument(set_association)
    _add_force_argument(set_association)

    skip = subparsers.add_parser("skip", help="Mark a Terraform address as skipped")
    skip.add_argument("--addr", required=True, help="Terraform resource address")
    _add_group_argument(skip)
    _add_force_argument(skip)

    untrack = subparsers.add_parser("untrack", help="Remove a Terraform address from the ledger")
    untrack.add_argument("--addr", required=True, help="Terraform resource address")
    _add_group_argument(untrack)
    _add_force_argument(untrack)

    diff = subparsers.add_parser("compute-diff", help="Summarise migration status per stack")
    _add_group_argument(diff)
    diff.add_argument(
        "--details",
        action="store_true",
        help="List the addresses in every status",
    )

    resolve = subparsers.add_parser(
        "resolve-imports", help="Resolve import stubs into a pulumi import file"
    )
    resolve.add_argument("--group", required=True, help="Pulumi stack to resolve")
    resolve.add_argument("--stubs", type=Path, help="Import stub file (generated when missing)")
    resolve.add_argument("--output", type=Path, help="Where to write the resolved import file")

    provider = subparsers.add_parser(
        "suggest-provider", help="Suggest the Pulumi provider for a Terraform provider"
    )
    provider.add_argument("provider", help="e.g. registry.terraform.io/hashicorp/aws")

    resource = subparsers.add_parser(
        "suggest-resource", help="Suggest the Pulumi type for a Terraform resource type"
    )
    resource.add_argument("provider", help="e.g. registry.terraform.io/hashicorp/aws")
    resource.add_argument("resource", help="e.g. aws_s3_bucket")

    return parser.parse_args(list(argv))


def _add_group_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--group", help="Limit the command to one Pulumi stack")


def _add_force_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--force",
        action="store_true",
        help="Save even when the change introduces integrity errors",
    )


def _dispatch(args: argparse.Namespace, config: CliConfig) -> int:
    ledger_path: Path = args.ledger or config.ledger_path
    reader = TerraformInventoryReader(terraform_bin=config.terraform_bin)
    log.debug("Running %s against %s", args.command, ledger_path)

    if args.command == "init":
        draft = init_ledger_command(
            ledger_path=ledger_path,
            group=args.group,
            state_location=args.tf_state,
            source_location=args.tf_sources,
            target_location=args.pulumi_sources,
            type_lookup=TypeMapper(JsonMappingLoader(config.type_mappings_dir)),
            project=args.project,
            force=args.force,
            read_inventory=reader,
        )
        print(format_init_report(draft, ledger_path=ledger_path))
        return 0

    if args.command == "next":
        step = next_step_command(
            ledger_path=ledger_path, read_inventory=reader, pulumi_bin=config.pulumi_bin
        )
        print(format_next_step(step))
        return 0

    if args.command == "check":
        result = check_ledger(ledger_path=ledger_path, read_inventory=reader)
        print(format_check_report(result))
        return 1 if result.has_errors else 0

    if args.command == "set-association":
        report = set_association_command(
            ledger_path=ledger_path,
            address=args.addr,
            identifier=args.urn,
            group=args.group,
            force=args.force,
            read_inventory=reader,
        )
        action = f"Updated URN for {report.outcome} resource(s) with address {args.addr!r}"
        print(format_mutation_report(report, action=action))
        return 0

    if args.command == "skip":
        report = skip_command(
            ledger_path=ledger_path,
            address=args.addr,
            group=args.group,
            force=args.force,
            read_inventory=reader,
        )
        action = f"Marked {report.outcome} resource(s) with address {args.addr!r} as skipped"
        print(format_mutation_report(report, action=action))
        return 0

    if args.command == "untrack":
        report = untrack_command(
            ledger_path=ledger_path,
            address=args.addr,
            group=args.group,
            force=args.force,
            read_inventory=reader,
        )
        action = f"Removed {report.outcome} resource(s) with address {args.addr!r}"
        print(format_mutation_report(report, action=action))
        return 0

    if args.command == "compute-diff":
        diffs = compute_diff(
            ledger_path=ledger_path,
            group=args.group,
            read_inventory=reader,
            pulumi_bin=config.pulumi_bin,
        )
        print("\n\n".join(format_diff_summary(diff, details=args.details) for diff in diffs))
        return 0

    if args.command == "resolve-imports":
        import_report = resolve_imports_command(
            ledger_path=ledger_path,
            group=args.group,
            stubs_path=args.stubs,
            output_path=args.output,
            read_inventory=reader,
            pulumi_bin=config.pulumi_bin,
        )
        print(format_import_report(import_report))
        return 0

    if args.command == "suggest-provider":
        print(suggest_provider(args.provider))
        return 0

    if args.command == "suggest-resource":
        mapper = TypeMapper(JsonMappingLoader(config.type_mappings_dir))
        print(suggest_resource(args.provider, args.resource, type_lookup=mapper))
        return 0

    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
    try:
        config = get_cli_config()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else config.log_level)

    try:
        exit_code = _dispatch(parsed_args, config)
    except CollaboratorFailure as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if exc.diagnostics:
            print(exc.diagnostics, file=sys.stderr)
        sys.exit(1)
    except StateBridgeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
