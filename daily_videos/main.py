#!/usr/bin/env python3
"""
daily-videos - calendar of the videos and Live Photos captured each day.
"""

import argparse
import logging
import os
import sys

from daily_videos.utils.macos import set_process_name
from daily_videos.core.config import load_config, save_config, get_default_config_path
from daily_videos.core.exceptions import DailyVideosError
from daily_videos.core.models import CleanupTimeframe, WeekStart
from daily_videos.commands import (
    MonthCommand,
    DayCommand,
    PreferCommand,
    PinCommand,
    CleanupCommand
)


def main(argv=None):
    """Main entry point for daily-videos."""
    set_process_name("daily-videos")

    parser = argparse.ArgumentParser(
        description="Calendar of the videos and Live Photos captured each day",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  daily-videos month                        # Current month with media counts
  daily-videos month --year 2024 --month 2  # A specific month
  daily-videos day 2024-02-29               # Media captured on a day
  daily-videos prefer 2024-02-29 ASSET_ID   # Choose a day's preferred media
  daily-videos pin ASSET_ID                 # Pin a media item
  daily-videos cleanup pins --older-than 1y --apply
        """
    )

    default_config = get_default_config_path()

    parser.add_argument(
        '--config',
        help=f'Path to configuration file (default: {default_config})',
        default=None
    )
    parser.add_argument(
        '--library',
        metavar='PATH',
        help='Read media from a JSON library export instead of Apple Photos'
    )
    parser.add_argument(
        '--week-start',
        choices=[ws.value for ws in WeekStart],
        help='First day of the week (saved to config with --save)'
    )
    parser.add_argument(
        '--save',
        action='store_true',
        help='Persist --library/--week-start to the configuration file'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    month_parser = subparsers.add_parser('month', help='Show a month grid with media counts')
    month_parser.add_argument('--year', type=int, help='Year (default: this year)')
    month_parser.add_argument('--month', type=int, help='Month 1-12 (default: this month)')

    day_parser = subparsers.add_parser('day', help="List a day's media")
    day_parser.add_argument('date', help='Day to list (YYYY-MM-DD)')

    prefer_parser = subparsers.add_parser('prefer', help="Show or set a day's preferred media")
    prefer_parser.add_argument('date', help='Day (YYYY-MM-DD)')
    prefer_parser.add_argument('asset_id', nargs='?', help='Asset identifier to prefer')
    prefer_parser.add_argument('--clear', action='store_true', help='Remove the preference')

    pin_parser = subparsers.add_parser('pin', help='Pin a media item')
    pin_parser.add_argument('asset_id', help='Asset identifier')

    unpin_parser = subparsers.add_parser('unpin', help='Unpin a media item')
    unpin_parser.add_argument('asset_id', help='Asset identifier')

    subparsers.add_parser('pins', help='List pinned media')

    cleanup_parser = subparsers.add_parser('cleanup', help='Remove old preferences or pins')
    cleanup_parser.add_argument('target', choices=['preferences', 'pins'])
    cleanup_parser.add_argument(
        '--older-than',
        choices=[tf.value for tf in CleanupTimeframe],
        default=CleanupTimeframe.OLDER_THAN_ONE_YEAR.value,
        help='Remove records older than this (default: 1y)'
    )
    cleanup_parser.add_argument(
        '--apply',
        action='store_true',
        help='Apply the cleanup (default is dry-run)'
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
        if args.library:
            config.library_export_path = os.path.abspath(os.path.expanduser(args.library))
        if args.week_start:
            config.week_start = WeekStart.parse(args.week_start)
        if args.save:
            save_config(config, args.config)

        if args.verbose:
            actual_config_path = args.config if args.config else get_default_config_path()
            print(f"Using config: {actual_config_path}")

        if args.command == 'month':
            success = MonthCommand(config, verbose=args.verbose).run(year=args.year, month=args.month)

        elif args.command == 'day':
            success = DayCommand(config, verbose=args.verbose).run(args.date)

        elif args.command == 'prefer':
            success = PreferCommand(config, verbose=args.verbose).run(
                args.date, asset_identifier=args.asset_id, clear=args.clear
            )

        elif args.command in ('pin', 'unpin'):
            success = PinCommand(config, verbose=args.verbose).run(args.command, args.asset_id)

        elif args.command == 'pins':
            success = PinCommand(config, verbose=args.verbose).run('list')

        elif args.command == 'cleanup':
            success = CleanupCommand(config, verbose=args.verbose).run(
                args.target, older_than=args.older_than, dry_run=not args.apply
            )

        else:
            print(f"Unknown command '{args.command}'.")
            return 1

        return 0 if success else 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130
    except DailyVideosError as e:
        print(f"Error: {e}")
        if not args.verbose:
            print("Re-run with --verbose for more detail.")
        return 1


if __name__ == '__main__':
    sys.exit(main())
