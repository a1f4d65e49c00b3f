#!/usr/bin/env python3
"""
Command line interface for managing Gmail filters from a filters file.

Usage:
    python cli.py apply --file filters.yaml
    python cli.py delete
    python cli.py export --file filters.yaml
    python cli.py sync --file filters.yaml --dry-run
    python cli.py health
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import Config, create_sample_config, load_config
from core.errors import FilterSyncError
from core.filterfile import load_rules, save_rules
from core.labels import LabelDirectory
from core.models import ApplyResult, ExportResult
from core.rules import validate_rules
from core.sync import apply_rules, delete_all_filters, export_filters, sync_rules
from providers.base import FilterProvider

logger = logging.getLogger(__name__)


def setup_logging(level: str, verbose: bool = False) -> None:
    """Configure root logging for a CLI run."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )


def get_provider(config: Config) -> FilterProvider:
    """
    Factory function to create the filter provider.

    Args:
        config: Loaded configuration

    Returns:
        Unconnected FilterProvider instance
    """
    from providers.gmail import GmailFilterProvider
    return GmailFilterProvider(
        user_id=config.gmail.user_id,
        scopes=config.gmail.scopes,
        credentials_file=config.gmail.credentials_file,
        token_file=config.gmail.token_file,
    )


def _filters_file(args: argparse.Namespace, config: Config) -> Path:
    return Path(getattr(args, "file", None) or config.filters_file).expanduser()


def _dry_run(args: argparse.Namespace, config: Config) -> bool:
    return bool(getattr(args, "dry_run", False) or config.dry_run)


def print_apply_result(result: ApplyResult, dry_run: bool) -> None:
    """Print apply statistics."""
    print("\n" + "=" * 50)
    print("APPLY SUMMARY" + (" (DRY RUN)" if dry_run else ""))
    print("=" * 50)
    print(f"Rules:            {result.rules_count}")
    print(f"Filters planned:  {len(result.planned)}")
    if result.filters_deleted:
        print(f"Filters deleted:  {result.filters_deleted}")
    print(f"Filters created:  {result.filters_created}")
    print("=" * 50 + "\n")


def print_export_result(result: ExportResult, path: Path) -> None:
    """Print export statistics."""
    print(f"Exported {result.rules_after} filters to {path} "
          f"({result.provider_filters} Gmail filters, {result.rules_before} already in file)")


def cmd_apply(args: argparse.Namespace, config: Config) -> int:
    """Handle the 'apply' subcommand."""
    path = _filters_file(args, config)
    dry_run = _dry_run(args, config)
    rules = load_rules(path)
    validate_rules(rules)

    with get_provider(config) as provider:
        labels = LabelDirectory(provider, dry_run=dry_run)
        labels.preload()
        result = apply_rules(rules, provider, labels, dry_run=dry_run)

    print_apply_result(result, dry_run)
    return 0


def cmd_delete(args: argparse.Namespace, config: Config) -> int:
    """Handle the 'delete' subcommand."""
    dry_run = _dry_run(args, config)
    with get_provider(config) as provider:
        deleted = delete_all_filters(provider, dry_run=dry_run)

    verb = "Would delete" if dry_run else "Deleted"
    print(f"{verb} {deleted} filters")
    return 0


def cmd_export(args: argparse.Namespace, config: Config) -> int:
    """Handle the 'export' subcommand."""
    path = _filters_file(args, config)
    existing = load_rules(path, missing_ok=True)

    with get_provider(config) as provider:
        result = export_filters(provider, LabelDirectory(provider), existing)

    save_rules(path, result.rules)
    print_export_result(result, path)
    return 0


def cmd_sync(args: argparse.Namespace, config: Config) -> int:
    """Handle the 'sync' subcommand: replace all filters with the file's."""
    path = _filters_file(args, config)
    dry_run = _dry_run(args, config)
    rules = load_rules(path)
    validate_rules(rules)

    with get_provider(config) as provider:
        labels = LabelDirectory(provider, dry_run=dry_run)
        labels.preload()
        result = sync_rules(rules, provider, labels, dry_run=dry_run)

    print_apply_result(result, dry_run)
    return 0


def cmd_health(args: argparse.Namespace, config: Config) -> int:
    """Handle the 'health' subcommand."""
    provider = get_provider(config)

    print(f"Checking {provider.name} health...")
    try:
        provider.connect()
        healthy, message = provider.health_check()
        provider.disconnect()
    except FilterSyncError as e:
        print(f"✗ {provider.name}: Connection failed - {e}")
        return 1

    if healthy:
        print(f"✓ {provider.name}: {message}")
        return 0
    print(f"✗ {provider.name}: {message}")
    return 1


def cmd_sample_config(args: argparse.Namespace, config: Config) -> int:
    """Handle the 'sample-config' subcommand."""
    output: Optional[Path] = Path(args.output).expanduser() if args.output else None
    sample = create_sample_config(output)
    if output is None:
        print(sample)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gmail-filters",
        description="Manage Gmail filters from a declarative filters file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s apply --file filters.yaml
  %(prog)s apply --file filters.yaml --dry-run
  %(prog)s delete
  %(prog)s export --file filters.yaml
  %(prog)s sync --file filters.yaml
  %(prog)s health
        """,
    )

    # Global options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--config", "-c",
        help="Config file (default: search GMAIL_FILTERS_CONFIG and standard locations)",
    )

    file_group = argparse.ArgumentParser(add_help=False)
    file_group.add_argument(
        "--file", "-f",
        help="Filters file (default: filters_file from config)",
    )

    dry_run_group = argparse.ArgumentParser(add_help=False)
    dry_run_group.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Don't actually change any filters",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    apply_parser = subparsers.add_parser(
        "apply",
        parents=[file_group, dry_run_group],
        help="Create Gmail filters from the filters file",
    )
    apply_parser.set_defaults(func=cmd_apply)

    delete_parser = subparsers.add_parser(
        "delete",
        parents=[dry_run_group],
        help="Delete all existing Gmail filters",
    )
    delete_parser.set_defaults(func=cmd_delete)

    export_parser = subparsers.add_parser(
        "export",
        parents=[file_group],
        help="Export existing Gmail filters into the filters file",
    )
    export_parser.set_defaults(func=cmd_export)

    sync_parser = subparsers.add_parser(
        "sync",
        parents=[file_group, dry_run_group],
        help="Delete all Gmail filters, then apply the filters file",
    )
    sync_parser.set_defaults(func=cmd_sync)

    health_parser = subparsers.add_parser(
        "health",
        help="Check provider connection health",
    )
    health_parser.set_defaults(func=cmd_health)

    sample_parser = subparsers.add_parser(
        "sample-config",
        help="Print or write a sample configuration file",
    )
    sample_parser.add_argument(
        "--output", "-o",
        help="Write the sample config to this path instead of printing it",
    )
    sample_parser.set_defaults(func=cmd_sample_config)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(Path(args.config) if args.config else None)
    setup_logging(config.log_level, args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args, config)
    except FilterSyncError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
