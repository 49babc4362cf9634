"""
Main application entry point for the dead link monitor.
"""

import sys
import argparse
from typing import List, Optional

from dead_link_monitor.config import ConfigManager, SystemConfig
from dead_link_monitor.concurrent.controller import LinkCheckController, PipelineContext
from dead_link_monitor.extractors import DocumentFormat
from dead_link_monitor.services.report_generator import STDOUT_DESTINATION, ReportGenerator
from dead_link_monitor.utils.logging import get_logger, setup_logging
from dead_link_monitor.utils.errors import ConfigurationError, ValidationError


logger = get_logger(__name__)

EXIT_OK = 0
EXIT_BROKEN_LINKS = 1
EXIT_USAGE = 2


class DeadLinkMonitorApp:
    """Application object: one configuration, one run, its reports."""

    def __init__(self, config: SystemConfig, client=None):
        """
        Initialize the application.

        Args:
            config: Effective configuration (file, environment and CLI merged)
            client: Optional transport override, used by tests
        """
        self.config = config
        # With JSON on stdout, everything else printed moves to stderr
        self.console = sys.stderr if config.report.json_output == STDOUT_DESTINATION else sys.stdout
        self.controller = LinkCheckController(config.pipeline, client=client, progress_stream=self.console)
        self.context: Optional[PipelineContext] = None

    def run(self, paths: List[str], forced_format: Optional[DocumentFormat] = None) -> int:
        """
        Check all links in ``paths``, emit the enabled reports and return the
        process exit code.
        """
        self.context = self.controller.check(paths, forced_format)
        self.report()
        return self.exit_code()

    def report(self) -> None:
        if self.context is None:
            return
        generator = ReportGenerator(self.context.results)
        if self.config.report.console_report:
            generator.print_console_report(self.console)
        if self.config.report.json_output:
            generator.write_json(self.config.report.json_output)

    def exit_code(self) -> int:
        if self.context is None:
            return EXIT_OK
        if self.config.report.fail_on_broken and self.context.results.get_failures():
            return EXIT_BROKEN_LINKS
        return EXIT_OK


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def create_cli_parser() -> argparse.ArgumentParser:
    """Create command-line interface parser."""
    parser = argparse.ArgumentParser(
        prog='dead-link-monitor',
        description='Dead Link Monitor - find broken links in HTML and Markdown documents',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s docs/*.md                      # Check Markdown files
  %(prog)s --html export/*.txt            # Treat every input as HTML
  %(prog)s -n 16 --report site/*.html     # 16 connections, print a report
  %(prog)s --json broken.json README.md   # Export failures as JSON
  %(prog)s --json - README.md             # Export failures to stdout
        """
    )

    parser.add_argument(
        'files',
        nargs='*',
        help='Documents to scan for links'
    )

    # Configuration options
    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Path to configuration file (default: dead_link_monitor.json)'
    )

    # Mode selection
    mode_group = parser.add_mutually_exclusive_group()

    mode_group.add_argument(
        '--html',
        action='store_true',
        help='Treat every input as HTML'
    )

    mode_group.add_argument(
        '--markdown',
        action='store_true',
        help='Treat every input as Markdown'
    )

    # Fetch options
    parser.add_argument(
        '--max-connections', '-n',
        type=positive_int,
        help='Maximum simultaneous requests (default: 4)'
    )

    parser.add_argument(
        '--timeout',
        type=positive_float,
        help='Per-request timeout in seconds (default: 30)'
    )

    # Output options
    parser.add_argument(
        '--report',
        action='store_true',
        help='Print a report of non-200 links after the run'
    )

    parser.add_argument(
        '--json',
        type=str,
        metavar='DEST',
        help='Write failing links as JSON to DEST ("-" for stdout)'
    )

    parser.add_argument(
        '--fail-on-broken',
        action='store_true',
        help='Exit with status 1 when any link is not 200'
    )

    # Logging options
    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Override log level from configuration'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file (rotated daily)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output (equivalent to --log-level DEBUG)'
    )

    return parser


def forced_format_from_args(args: argparse.Namespace) -> Optional[DocumentFormat]:
    if args.html:
        return DocumentFormat.HTML
    if args.markdown:
        return DocumentFormat.MARKDOWN
    return None


def build_config(args: argparse.Namespace) -> SystemConfig:
    """Load file/environment configuration and apply command-line overrides."""
    manager = ConfigManager(args.config) if args.config else ConfigManager()
    config = manager.load_config()

    if args.max_connections is not None:
        config.pipeline.max_connections = args.max_connections
    if args.timeout is not None:
        config.pipeline.request_timeout = args.timeout
    if args.report:
        config.report.console_report = True
    if args.json:
        config.report.json_output = args.json
    if args.fail_on_broken:
        config.report.fail_on_broken = True

    if args.verbose:
        config.log_level = 'DEBUG'
    elif args.log_level:
        config.log_level = args.log_level
    if args.log_file:
        config.log_file = args.log_file

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with command-line interface."""
    parser = create_cli_parser()
    # Conflicting --html/--markdown exits here with status 2
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return EXIT_USAGE

    try:
        setup_logging(config.log_level, config.log_file)
    except OSError as e:
        print(f"Cannot open log file {config.log_file}: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        app = DeadLinkMonitorApp(config)
    except ValidationError as e:
        logger.error(f"Invalid settings: {e.message}")
        return EXIT_USAGE

    try:
        return app.run(list(args.files), forced_format_from_args(args))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        return 130


if __name__ == "__main__":
    sys.exit(main())
