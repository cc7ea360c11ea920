"""
Main entry point for the Greenplum session deadlock detector.

Reads one pg_locks snapshot, builds the session wait-for graph and, when a
deadlock exists, prints the SQL that cancels enough sessions to break it.
"""

import argparse
import sys
import time
from typing import Any, Dict, List, Optional

from .config.detection_config import DetectionConfig
from .core.detector import DeadlockDetector, DeadlockResult
from .core.exceptions import DeadlockDetectionError
from .pg_connector import PostgresLockSource
from .report_generator import ReportGenerator
from .snapshot_loader import load_snapshot_file, save_snapshot_file
from .utils.logger import get_logger, set_console_level, set_log_level, log_system_info

EXIT_NO_DEADLOCK = 0
EXIT_DEADLOCK = 1
EXIT_ERROR = 2


class DeadlockDetectionSystem:
    """
    Main system orchestrator: snapshot source -> detector -> reports.
    """

    def __init__(self, config: Optional[DetectionConfig] = None,
                 report_generator: Optional[ReportGenerator] = None):
        """
        Initialize the detection system.

        Args:
            config: Effective configuration; defaults when omitted
            report_generator: Output writer; stderr/stdout when omitted
        """
        self.logger = get_logger("DeadlockDetectionSystem")
        self.config = config or DetectionConfig()
        self.detector = DeadlockDetector(self.config.get('remediation_template'))
        self.reports = report_generator or ReportGenerator()

    def fetch_rows(self, snapshot_file: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Read the lock snapshot, fully, from a file or from the database.

        Raises:
            SourceUnavailable: If the source cannot be read
        """
        if snapshot_file:
            return load_snapshot_file(snapshot_file)

        with PostgresLockSource(
            self.config.get('conn_str'),
            query=self.config.get('snapshot_query'),
            connect_timeout=self.config.get('connect_timeout'),
        ) as source:
            return source.fetch_lock_rows()

    def detect_deadlocks(self, rows: List[Dict[str, Any]]) -> DeadlockResult:
        start_time = time.time()
        result = self.detector.detect(rows)
        self.logger.log_stage(
            "Deadlock analysis", time.time() - start_time,
            rows=len(rows), sessions=result.stats.get('sessions', 0),
            edges=result.stats.get('edges', 0),
        )
        self.logger.log_detection_result(result)
        return result

    def report(self, result: DeadlockResult):
        """Write all configured outputs for a result"""
        self.reports.write_report(result)
        dotfile = self.config.get('dotfile')
        if dotfile:
            if result.deadlock_found:
                self.reports.write_dotfile(result, dotfile)
            else:
                self.logger.log_warning(f"No deadlock, wait-for graph not written to {dotfile}")
        self.reports.write_statement(result)
        output_file = self.config.get('output_file')
        if output_file:
            self.reports.save_results(result, output_file)

    def run(self, snapshot_file: Optional[str] = None,
            save_snapshot: Optional[str] = None) -> int:
        """
        Run one analysis and return the process exit status.

        Returns:
            EXIT_NO_DEADLOCK, EXIT_DEADLOCK or EXIT_ERROR
        """
        source = snapshot_file or "database"
        self.logger.log_detection_start(source, self.config.to_safe_dict())
        try:
            rows = self.fetch_rows(snapshot_file)
            if save_snapshot:
                save_snapshot_file(rows, save_snapshot)
            result = self.detect_deadlocks(rows)
            self.report(result)
        except DeadlockDetectionError as e:
            self.logger.log_error(e, f"analyzing lock snapshot from {source}")
            return EXIT_ERROR
        except OSError as e:
            self.logger.log_error(e, "writing output")
            return EXIT_ERROR

        return EXIT_DEADLOCK if result.deadlock_found else EXIT_NO_DEADLOCK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gp-deadlock",
        description=(
            "Detect session deadlocks from the current pg_locks snapshot.\n"
            "Exits 0 when there is no deadlock. Otherwise prints the SQL that can "
            "break the deadlock to stdout and exits 1. Errors exit 2."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check the database named by a libpq connection string
  gp-deadlock -c "host=mdw dbname=postgres sslmode=disable"

  # Also write the wait-for graph for Graphviz
  gp-deadlock -c "dbname=postgres" -d waits.dot

  # Analyze a saved snapshot
  gp-deadlock --snapshot locks.json
        """
    )

    parser.add_argument(
        '-c', '--conn',
        dest='conn_str',
        help='Connection string (default: sslmode=disable)'
    )

    parser.add_argument(
        '-d', '--dotfile',
        help='If set, write the lock wait-for graph to this file in Graphviz DOT format'
    )

    parser.add_argument(
        '--snapshot',
        help='Read lock rows from this JSON file instead of the database'
    )

    parser.add_argument(
        '--save-snapshot',
        help='Save the lock rows that were read to this JSON file'
    )

    parser.add_argument(
        '--config',
        help='Path to configuration JSON file'
    )

    parser.add_argument(
        '--output', '-o',
        dest='output_file',
        help='Path to save detection results as JSON'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    logger = get_logger()

    try:
        config = DetectionConfig.load(
            args.config,
            overrides={
                'conn_str': args.conn_str,
                'dotfile': args.dotfile,
                'output_file': args.output_file,
                'log_level': 'DEBUG' if args.verbose else None,
            },
        )
    except DeadlockDetectionError as e:
        logger.log_error(e, "loading configuration")
        sys.exit(EXIT_ERROR)

    set_log_level(config.get('log_level'))
    set_console_level('DEBUG' if args.verbose else 'WARNING')
    if config.get('log_file'):
        logger.add_file_handler(config.get('log_file'))
    if args.verbose:
        log_system_info()

    system = DeadlockDetectionSystem(config)
    sys.exit(system.run(args.snapshot, args.save_snapshot))


if __name__ == '__main__':
    main()
