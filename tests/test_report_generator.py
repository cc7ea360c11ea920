import io
import json

from gp_deadlock_system.core.detector import DeadlockDetector
from gp_deadlock_system.report_generator import ReportGenerator


def make_generator():
    report, statement = io.StringIO(), io.StringIO()
    return ReportGenerator(report_stream=report, statement_stream=statement), report, statement


class TestReportGenerator:

    def test_no_deadlock(self, no_deadlock_rows):
        generator, report, statement = make_generator()
        result = DeadlockDetector().detect(no_deadlock_rows)
        generator.write_report(result)
        generator.write_statement(result)
        assert report.getvalue() == "No deadlock\n"
        assert statement.getvalue() == ""

    def test_deadlock_report_and_statement(self, two_session_rows):
        generator, report, statement = make_generator()
        result = DeadlockDetector().detect(two_session_rows)
        generator.write_report(result)
        generator.write_statement(result)

        lines = report.getvalue().splitlines()
        assert lines[0] == "Deadlock is found: "
        assert len([line for line in lines if line.startswith("Session ")]) == 2
        assert lines[-1] == "You can kill these session to break deadlock. sessions: 20"
        assert statement.getvalue() == (
            "SELECT pg_cancel_backend(procpid) FROM pg_stat_activity WHERE sess_id IN (20);\n"
        )

    def test_write_dotfile(self, tmp_path, three_session_rows):
        generator, report, _ = make_generator()
        result = DeadlockDetector().detect(three_session_rows)
        path = generator.write_dotfile(result, str(tmp_path / "waits.dot"))

        dot = path.read_text()
        assert dot.startswith("digraph G {")
        assert dot.count("->") == 3
        for session_id in (100, 200, 300):
            assert f'label="{session_id}"' in dot
        assert f"has been write to '{path}'" in report.getvalue()

    def test_save_results(self, tmp_path, two_session_rows):
        generator, _, _ = make_generator()
        result = DeadlockDetector().detect(two_session_rows)
        path = generator.save_results(result, str(tmp_path / "results.json"))

        data = json.loads(path.read_text())
        assert data['deadlock_found'] is True
        assert data['kill_sessions'] == [20]
        assert data['cycles'] == [[10, 20]]
        assert {edge['waiter'] for edge in data['edges']} == {10, 20}
        assert data['edges'][0]['object'].startswith('seg:-1;type:relation')
        assert 'timestamp' in data

    def test_results_without_deadlock(self, no_deadlock_rows):
        generator, _, _ = make_generator()
        data = generator.build_results(DeadlockDetector().detect(no_deadlock_rows))
        assert data['deadlock_found'] is False
        assert data['statement'] is None
        assert data['edges'] == []
