import pytest

from ielts_exam.services.timer import format_time, is_warning


@pytest.mark.parametrize("seconds, text", [
    (0, "00:00"),
    (59, "00:59"),
    (600, "10:00"),
    (3599, "59:59"),
    (3600, "1:00:00"),
    (3725, "1:02:05"),
    (-5, "00:00"),
])
def test_format_time(seconds, text):
    assert format_time(seconds) == text


def test_is_warning():
    assert is_warning(599)
    assert not is_warning(600)
    assert is_warning(30, threshold=60)
