"""
Tests for script log filtering and forwarding.
"""

import logging
import time
from datetime import datetime

import pytest
from visual_script_core.models import LogLevel
from visual_script_core.runtime.log_channel import LogChannel, default_sink, format_trace_arg


FIXED_TIME = datetime(2020, 1, 2, 3, 4, 5)


@pytest.fixture
def channel():
    return LogChannel(LogLevel.WARN, time_format='%Y/%m/%d %H:%M:%S', clock=lambda: FIXED_TIME)


class TestLogChannel:
    """Test cases for LogChannel."""

    def test_filters_by_level(self, channel):
        """Test that messages more verbose than the level are dropped."""
        assert channel.emit(LogLevel.INFO, 'x') is False
        assert channel.emit(LogLevel.ERROR, 'y') is True
        assert channel.drain() == ['[ERROR] 2020/01/02 03:04:05 y']

    def test_same_level_passes(self, channel):
        channel.emit(LogLevel.WARN, 'careful')
        assert channel.drain() == ['[WARN] 2020/01/02 03:04:05 careful']

    @pytest.mark.parametrize('level', [LogLevel.DISABLE, LogLevel.INHERIT, -1, 9])
    def test_out_of_range_levels_dropped(self, channel, level):
        channel.set_level(LogLevel.DEBUG)
        assert channel.emit(level, 'nope') is False
        assert channel.drain() == []

    def test_disable_suppresses_everything(self, channel):
        channel.set_level(LogLevel.DISABLE)
        channel.emit(LogLevel.ERROR, 'lost')
        assert channel.drain() == []

    def test_set_level_returns_previous(self, channel):
        assert channel.set_level(LogLevel.DEBUG) == LogLevel.WARN
        assert channel.set_level(LogLevel.ERROR) == LogLevel.DEBUG
        assert channel.level == LogLevel.ERROR

    @pytest.mark.parametrize('level', [LogLevel.INHERIT, -1, 42])
    def test_set_level_ignores_invalid(self, channel, level):
        assert channel.set_level(level) == LogLevel.WARN
        assert channel.level == LogLevel.WARN

    def test_lines_keep_call_order(self, channel):
        for i in range(5):
            channel.emit(LogLevel.ERROR, str(i))
        assert [line.rsplit(' ', 1)[1] for line in channel.drain()] == ['0', '1', '2', '3', '4']

    def test_trace(self, channel):
        """Test the debug call record with quoted string arguments."""
        channel.set_level(LogLevel.DEBUG)
        assert channel.trace('copy', ['a.txt', 3, True]) is True
        assert channel.drain() == ['[DEBUG] 2020/01/02 03:04:05 => copy("a.txt", 3, true)']

    def test_trace_filtered_below_debug(self, channel):
        assert channel.trace('copy', []) is False

    def test_format_trace_arg(self):
        assert format_trace_arg('s') == '"s"'
        assert format_trace_arg(False) == 'false'
        assert format_trace_arg(7) == '7'


class TestConsumer:
    """Test cases for the forwarding thread."""

    def test_forwards_to_sink(self, channel):
        received = []
        channel.start_consumer(received.append)
        channel.emit(LogLevel.ERROR, 'one')
        channel.emit(LogLevel.WARN, 'two')
        channel.stop_consumer()
        assert received == ['[ERROR] 2020/01/02 03:04:05 one', '[WARN] 2020/01/02 03:04:05 two']

    def test_failing_sink_keeps_consuming(self, channel):
        received = []

        def sink(line):
            if 'bad' in line:
                raise RuntimeError('sink down')
            received.append(line)

        channel.start_consumer(sink)
        channel.emit(LogLevel.ERROR, 'bad')
        channel.emit(LogLevel.ERROR, 'good')
        deadline = time.time() + 2.0
        while not received and time.time() < deadline:
            time.sleep(0.01)
        channel.stop_consumer()
        assert received == ['[ERROR] 2020/01/02 03:04:05 good']

    def test_default_sink_uses_logging(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='visual_script_core.script'):
            default_sink('[WARN] 2020/01/02 03:04:05 hello')
        assert caplog.records[-1].levelno == logging.WARNING
        assert 'hello' in caplog.records[-1].getMessage()
