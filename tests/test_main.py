import json
import logging
from unittest.mock import patch

import pytest

from gp_deadlock_system.core.exceptions import SourceUnavailable
from gp_deadlock_system.main import EXIT_DEADLOCK, EXIT_ERROR, EXIT_NO_DEADLOCK, main
from gp_deadlock_system.utils.logger import get_logger


def write_snapshot(tmp_path, rows):
    path = tmp_path / "locks.json"
    path.write_text(json.dumps({'rows': rows}))
    return str(path)


def run_main(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for variable in ('GP_DEADLOCK_CONN', 'GP_DEADLOCK_DOTFILE', 'GP_DEADLOCK_LOG_LEVEL', 'GP_DEADLOCK_LOG_FILE'):
        monkeypatch.delenv(variable, raising=False)


class TestMain:

    def test_no_deadlock_exits_zero(self, tmp_path, capsys, no_deadlock_rows):
        code = run_main(['--snapshot', write_snapshot(tmp_path, no_deadlock_rows)])
        captured = capsys.readouterr()
        assert code == EXIT_NO_DEADLOCK
        assert captured.out == ""
        assert "No deadlock" in captured.err

    def test_deadlock_exits_one_with_statement_on_stdout(self, tmp_path, capsys, two_session_rows):
        code = run_main(['--snapshot', write_snapshot(tmp_path, two_session_rows)])
        captured = capsys.readouterr()
        assert code == EXIT_DEADLOCK
        assert captured.out == (
            "SELECT pg_cancel_backend(procpid) FROM pg_stat_activity WHERE sess_id IN (20);\n"
        )
        assert "Deadlock is found:" in captured.err
        assert "blocked by Session 10(granted ShareLock);" in captured.err

    def test_dotfile_and_output(self, tmp_path, capsys, three_session_rows):
        dotfile = tmp_path / "waits.dot"
        output = tmp_path / "results.json"
        code = run_main([
            '--snapshot', write_snapshot(tmp_path, three_session_rows),
            '-d', str(dotfile),
            '-o', str(output),
        ])
        assert code == EXIT_DEADLOCK
        assert dotfile.read_text().count('->') == 3
        assert json.loads(output.read_text())['kill_sessions'] == [300]

    def test_save_snapshot(self, tmp_path, capsys, no_deadlock_rows):
        saved = tmp_path / "saved.json"
        run_main(['--snapshot', write_snapshot(tmp_path, no_deadlock_rows), '--save-snapshot', str(saved)])
        assert json.loads(saved.read_text())['rows'] == no_deadlock_rows

    def test_unknown_mode_exits_two(self, tmp_path, capsys, lock_row_factory):
        rows = [lock_row_factory(1, 'NoSuchLock', False, relation=1)]
        code = run_main(['--snapshot', write_snapshot(tmp_path, rows)])
        assert code == EXIT_ERROR
        assert capsys.readouterr().out == ""

    def test_malformed_row_exits_two(self, tmp_path, capsys, lock_row_factory):
        rows = [lock_row_factory(None, 'ShareLock', False, relation=1)]
        assert run_main(['--snapshot', write_snapshot(tmp_path, rows)]) == EXIT_ERROR

    def test_source_unavailable_exits_two(self, capsys):
        with patch('gp_deadlock_system.main.PostgresLockSource.fetch_lock_rows',
                   side_effect=SourceUnavailable("cannot connect")):
            assert run_main(['-c', 'host=nowhere']) == EXIT_ERROR
        assert capsys.readouterr().out == ""

    def test_database_source_uses_connection_string(self, capsys, two_session_rows):
        with patch('gp_deadlock_system.main.PostgresLockSource') as source_class:
            source = source_class.return_value.__enter__.return_value
            source.fetch_lock_rows.return_value = two_session_rows
            code = run_main(['-c', 'dbname=gp'])
        assert code == EXIT_DEADLOCK
        assert source_class.call_args[0][0] == 'dbname=gp'

    def test_bad_config_exits_two(self, tmp_path, capsys):
        assert run_main(['--config', str(tmp_path / "missing.json")]) == EXIT_ERROR

    def test_ill_typed_object_column_exits_two(self, tmp_path, capsys, lock_row_factory):
        rows = [
            lock_row_factory(10, 'ShareLock', True, relation=500),
            lock_row_factory(20, 'ExclusiveLock', False, relation=[500]),
        ]
        code = run_main(['--snapshot', write_snapshot(tmp_path, rows)])
        assert code == EXIT_ERROR
        assert capsys.readouterr().out == ""

    def test_bad_remediation_template_exits_two(self, tmp_path, capsys, two_session_rows):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({'remediation_template': 'SELECT f({x}) WHERE s IN ({sessions});'}))
        code = run_main(['--config', str(config_file), '--snapshot', write_snapshot(tmp_path, two_session_rows)])
        assert code == EXIT_ERROR
        assert capsys.readouterr().out == ""

    def test_console_shows_info_only_when_verbose(self, tmp_path, capsys, no_deadlock_rows):
        snapshot = write_snapshot(tmp_path, no_deadlock_rows)
        console = get_logger().console_handler

        run_main(['--snapshot', snapshot])
        assert console.level == logging.WARNING

        run_main(['--snapshot', snapshot, '-v'])
        assert console.level == logging.DEBUG

        run_main(['--snapshot', snapshot])
        assert console.level == logging.WARNING
