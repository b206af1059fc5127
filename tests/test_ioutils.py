import io

import pytest

from stdkit.ioutils import new_bytes_read_closer, read_all


class FakeTimer:
    def __init__(self):
        self.stops = 0

    def stop(self):
        self.stops += 1
        return 0.0


class BrokenReader:
    def read(self):
        raise OSError("broken")


def test_new_bytes_read_closer():
    data = b"abc"
    reader = new_bytes_read_closer(data)
    assert reader.read() == data
    reader.close()
    assert reader.closed is True


def test_new_bytes_read_closer_as_context_manager():
    with new_bytes_read_closer(b"xyz") as reader:
        assert reader.read() == b"xyz"
    assert reader.closed is True


def test_read_all():
    timer = FakeTimer()
    assert read_all(io.BytesIO(b"hello"), timer) == b"hello"
    assert timer.stops == 1


def test_read_all_stops_timer_on_error():
    timer = FakeTimer()
    with pytest.raises(OSError):
        read_all(BrokenReader(), timer)
    assert timer.stops == 1