#!/usr/bin/env python3
"""
Report Generator Module
Formats detection results: the human report, the remediation statement,
the Graphviz wait-for graph and the JSON results file.
"""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, TextIO

from .core.detector import DeadlockResult
from .core.graph_analyzer import GraphAnalyzer

logger = logging.getLogger(__name__)


class ReportGenerator:
    """
    Writes detection results to the diagnostic and primary output streams
    """

    def __init__(self, report_stream: TextIO = None, statement_stream: TextIO = None):
        """
        Args:
            report_stream: Human report destination (default stderr)
            statement_stream: Remediation SQL destination (default stdout)
        """
        self.report_stream = report_stream or sys.stderr
        self.statement_stream = statement_stream or sys.stdout

    def write_report(self, result: DeadlockResult):
        """Write one line per wait-for edge, or 'No deadlock'"""
        if not result.deadlock_found:
            print("No deadlock", file=self.report_stream)
            return

        print("Deadlock is found: ", file=self.report_stream)
        for line in result.report_lines:
            print(line, file=self.report_stream)

    def write_statement(self, result: DeadlockResult):
        if not result.deadlock_found:
            return
        print(
            f"You can kill these session to break deadlock. sessions: {result.session_list}",
            file=self.report_stream,
        )
        print(result.statement, file=self.statement_stream)

    def write_dotfile(self, result: DeadlockResult, dotfile: str) -> Path:
        """
        Write the reduced wait-for graph as Graphviz DOT

        Args:
            result: Result holding the reduced graph
            dotfile: Output path

        Returns:
            Path: the written file
        """
        path = Path(dotfile)
        analyzer = GraphAnalyzer(result.reduced_graph)
        path.write_text(analyzer.to_dot())
        print(f"The lock waits-for graph has been write to '{path}'", file=self.report_stream)
        logger.debug(f"Wrote {analyzer.nx_graph.number_of_edges()} edges to {path}")
        return path

    def build_results(self, result: DeadlockResult) -> Dict[str, Any]:
        """Serializable view of a detection result"""
        return {
            'timestamp': time.time(),
            'deadlock_found': result.deadlock_found,
            'kill_sessions': result.kill_sessions,
            'statement': result.statement or None,
            'cycles': result.cycles,
            'edges': [
                {
                    'waiter': edge.waiter,
                    'holder': edge.holder,
                    'wait_mode': edge.wait_mode.value,
                    'held_mode': edge.held_mode.value,
                    'object': edge.obj.describe(),
                    'description': str(edge),
                }
                for edge in result.edges
            ],
            'stats': result.stats,
        }

    def save_results(self, result: DeadlockResult, output_path: str) -> Path:
        """
        Save detection results to a JSON file

        Args:
            result: Detection result
            output_path: Path to output file
        """
        path = Path(output_path)
        with open(path, 'w') as f:
            json.dump(self.build_results(result), f, indent=2)
        logger.info(f"Results saved to {path}")
        return path
