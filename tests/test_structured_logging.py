import json

import pytest

from rooster.logging import StructuredLogger, configure_logging, get_logger


def test_structured_logger_json_format(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_operation('test_operation', days=3, total_fetched=42)

    captured = capsys.readouterr()
    log_lines = [line for line in captured.out.strip().split('\n') if line]

    assert len(log_lines) == 1
    log_data = json.loads(log_lines[0])
    assert log_data['level'] == 'INFO'
    assert log_data['operation'] == 'test_operation'
    assert log_data['days'] == 3
    assert log_data['total_fetched'] == 42
    assert 'timestamp' in log_data


def test_structured_logger_regular_format(capsys):
    logger = StructuredLogger(name='test', json_logging=False, level='INFO')
    logger.log_operation('test_operation')

    captured = capsys.readouterr()
    assert 'Operation: test_operation' in captured.out
    assert 'INFO' in captured.out


def test_issue_decisions(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_issue_decision(
        'excluded',
        2,
        reason='customer_follow_up',
        title='Thanks!',
        first_response_time='2024-01-01T10:00:00Z',
    )

    log_data = json.loads(capsys.readouterr().out.strip())
    assert log_data['operation'] == 'issue_excluded'
    assert log_data['decision'] == 'excluded'
    assert log_data['issue_number'] == 2
    assert log_data['reason'] == 'customer_follow_up'
    assert log_data['first_response_time'] == '2024-01-01T10:00:00Z'
    assert log_data['message'] == 'issue #2 excluded: Thanks! [customer_follow_up]'


def test_timed_operation_context_manager(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')

    with logger.timed_operation('fetch_issues', days=1):
        pass

    log_lines = [json.loads(line) for line in capsys.readouterr().out.strip().split('\n') if line]
    assert log_lines[0]['operation'] == 'fetch_issues_start'
    assert log_lines[0]['days'] == 1
    assert log_lines[1]['operation'] == 'fetch_issues'
    assert 'duration_ms' in log_lines[1]


def test_timed_operation_logs_and_reraises(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')

    with pytest.raises(RuntimeError):
        with logger.timed_operation('fetch_issues'):
            raise RuntimeError('boom')

    log_lines = [json.loads(line) for line in capsys.readouterr().out.strip().split('\n') if line]
    assert log_lines[-1]['level'] == 'ERROR'
    assert log_lines[-1]['error'] == 'RuntimeError'


def test_debug_is_filtered_at_info(capsys):
    logger = StructuredLogger(name='test', json_logging=False, level='INFO')
    logger.debug('hidden detail')

    assert 'hidden detail' not in capsys.readouterr().out


def test_configure_logging_replaces_global():
    logger1 = configure_logging(json_logging=True, level='DEBUG')
    assert get_logger() is logger1
    logger2 = configure_logging(json_logging=False, level='INFO')
    assert logger1 is not logger2
    assert get_logger() is logger2


def test_logger_writes_to_given_stream(capsys):
    import sys

    logger = StructuredLogger(name='test', json_logging=True, level='INFO', stream=sys.stderr)
    logger.log_operation('to_stderr')

    captured = capsys.readouterr()
    assert captured.out == ''
    assert json.loads(captured.err.strip())['operation'] == 'to_stderr'
