"""Web Map Inventory Module Entry Point

This module serves as the command-line interface and main entry point for the
web map inventory module.
"""

import argparse
import os
import sys
from typing import Optional

from maphub.config.config_loader import ConfigLoader
from maphub.connection import PortalClient
from maphub.exceptions import MapHubBaseException
from maphub.utils import setup_logging, get_logger
from .processor import WebMapInventory

ITEM_IDS_ENV_VAR = 'ARCGIS_ITEM_IDS'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Web Map Inventory - report which web maps depend on which layers"
    )
    parser.add_argument(
        "--environment",
        choices=["development", "production"],
        default="development",
        help="Environment to run against (default: development)"
    )
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory containing environment_config.json (default: config/)"
    )
    parser.add_argument(
        "--username",
        default=None,
        help="AGOL username (optional; defaults to ARCGIS_USERNAME). "
             "Without one only publicly available webmaps are processed"
    )
    parser.add_argument(
        "--item-ids",
        default=None,
        help="Comma separated AGOL item IDs of layers of interest "
             f"(defaults to {ITEM_IDS_ENV_VAR}); omit to report on all layers and maps"
    )
    parser.add_argument(
        "--query",
        default=None,
        help="Search query overriding the configured organization web map query"
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for report files (default: output.reports_dir from config)"
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Also write rotating log files to this directory"
    )
    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Never prompt for a password; rely on ARCGIS_PASSWORD"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Collect maps and layers without writing report files"
    )
    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the web map inventory module.
    
    Args:
        args: Command line arguments (defaults to sys.argv)
        
    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parsed_args = build_parser().parse_args(args)
    
    config_loader = ConfigLoader(parsed_args.config_dir)
    
    try:
        logging_config = config_loader.get_logging_config(parsed_args.environment)
        config_loader.validate_environment_variables(parsed_args.environment)
    except MapHubBaseException as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    
    setup_logging(
        environment=parsed_args.environment,
        log_level=logging_config.get("level", "INFO"),
        log_dir=parsed_args.log_dir,
        log_format=logging_config.get("format")
    )
    logger = get_logger(__name__)
    
    item_ids = parsed_args.item_ids if parsed_args.item_ids is not None else os.getenv(ITEM_IDS_ENV_VAR)
    
    try:
        client = PortalClient(config_loader, parsed_args.environment)
    except MapHubBaseException as e:
        logger.error(f"Could not create portal client: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    
    with client:
        inventory = WebMapInventory(
            config_loader,
            environment=parsed_args.environment,
            client=client,
            reports_dir=parsed_args.output_dir
        )
        result = inventory.process(
            dry_run=parsed_args.dry_run,
            item_ids=item_ids,
            username=parsed_args.username,
            query=parsed_args.query,
            prompt=not parsed_args.no_prompt
        )
    
    if not result.success:
        for error in result.errors:
            logger.error(error)
        print(f"Inventory failed: {'; '.join(result.errors)}", file=sys.stderr)
        return 1
    
    print_summary(result.metadata, result.execution_time)
    return 0


def print_summary(metadata: dict, execution_time: float) -> None:
    print(f"\n{'='*60}")
    print("WEB MAP INVENTORY SUMMARY")
    print(f"{'='*60}")
    print(f"Web maps:     {metadata.get('maps', 0)}")
    print(f"Layers:       {metadata.get('layers', 0)}")
    print(f"Dependencies: {metadata.get('dependencies', 0)}")
    print(f"Elapsed:      {execution_time:.1f}s")
    
    report_files = metadata.get('report_files', {})
    if report_files:
        print("Reports:")
        for name, path in report_files.items():
            print(f"  - {name}: {path}")
    elif metadata.get('dry_run'):
        print("Dry run - no reports written")


if __name__ == "__main__":
    sys.exit(main())
