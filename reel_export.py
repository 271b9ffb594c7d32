#!/usr/bin/env python3
"""
reel_export.py - Export saved film data to JSON, CSV or plain text

Writes films-summary.<ext> plus one <title>.<ext> per saved film into the
destination directory. JSON exports can also carry poster/backdrop copies.

Examples:
  python reel_export.py --format csv --destination ./exported-films
  python reel_export.py --format json --include-images
  python reel_export.py --output ./movies
"""

import sys
import logging
import argparse
from pathlib import Path

from reellib import console
from reellib.config_manager import ConfigManager
from reellib.constants import DEFAULT_EXPORT_DESTINATION, EXPORT_FORMATS
from reellib.exporter import ExportService
from reellib.models import ExportOptions
from reellib.storage import StorageService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def resolve_options(args: argparse.Namespace) -> ExportOptions:
    """Prompt for whatever was not given on the command line"""
    destination = args.destination
    if destination is None:
        destination = Path(console.ask('Export destination directory', default=DEFAULT_EXPORT_DESTINATION))

    fmt = args.format
    if fmt is None:
        fmt = console.choose('Export format:', [
            ('JSON (structured data)', 'json'),
            ('CSV (spreadsheet compatible)', 'csv'),
            ('Text (human readable)', 'txt'),
        ])

    include_images = args.include_images
    if fmt == 'json' and include_images is None:
        include_images = console.confirm('Include image files in export?', default=False)

    return ExportOptions(destination=destination, format=fmt, include_images=bool(include_images))


def run_export(config_manager: ConfigManager, args: argparse.Namespace) -> int:
    storage = StorageService(config_manager)
    service = ExportService(storage)

    console.info("Exporting film data...\n")
    films = storage.list_saved_films(args.output)
    if not films:
        console.warning("No films found to export")
        console.info('Use "reel search <title>" to search and save films first')
        return 0

    console.success(f"Found {len(films)} film(s) to export")

    options = resolve_options(args)
    exported = service.export(options, args.output)

    console.success("Export completed successfully!")
    console.info(f"📁 Exported to: {options.destination}")
    console.info(f"📄 Files created: {len(exported)}")
    for name in exported:
        console.info(f"  {name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='reel export',
        description='Export saved film data to different formats or locations',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  reel export
  reel export --format csv --destination ./exports
  reel export --format json --include-images
  reel export --output ./movies --format txt
        """
    )
    parser.add_argument('--output', '-o', type=Path, default=None,
                        help='Directory to export films from (default: from config)')
    parser.add_argument('--destination', '-d', type=Path, default=None,
                        help='Destination directory for export')
    parser.add_argument('--format', '-f', choices=EXPORT_FORMATS, default=None,
                        help='Export format (json|csv|txt)')
    parser.add_argument('--include-images', action='store_true', default=None,
                        help='Copy poster/backdrop images (json format only)')
    console.add_common_arguments(parser)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config_manager = console.init_command(args)
    return console.run_with_error_handling(run_export, config_manager, args)


if __name__ == '__main__':
    sys.exit(main())
