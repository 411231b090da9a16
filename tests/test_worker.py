import time
from unittest import mock

import pytest

from aubatch.worker import main


def test_sleeps_for_given_time():
    with mock.patch("time.sleep") as sleeper:
        assert main(["1.5"]) == 0
    sleeper.assert_called_once_with(1.5)


def test_negative_time_does_not_sleep():
    with mock.patch("time.sleep") as sleeper:
        assert main(["-2"]) == 0
    sleeper.assert_called_once_with(0.0)


def test_real_short_sleep_takes_time():
    start = time.monotonic()
    assert main(["0.05"]) == 0
    assert time.monotonic() - start >= 0.04


def test_missing_argument_is_an_error():
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2


def test_non_numeric_argument_is_an_error():
    with pytest.raises(SystemExit) as info:
        main(["soon"])
    assert info.value.code == 2