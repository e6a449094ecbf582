"""
Tests for frame decimation.
"""

import pytest

from pipeline.decimator import FrameDecimator


class TestFrameDecimator:
    def test_forwards_multiples_of_skip(self):
        decimator = FrameDecimator(3)

        forwarded = [i for i in range(1, 11) if decimator.accept()]

        assert forwarded == [3, 6, 9]

    @pytest.mark.parametrize("skip,total,expected", [(1, 7, 7), (2, 10, 5), (3, 10, 3), (4, 3, 0)])
    def test_forwarded_count_is_floor(self, skip, total, expected):
        decimator = FrameDecimator(skip)

        count = sum(1 for _ in range(total) if decimator.accept())

        assert count == expected

    def test_counter_and_reset(self):
        decimator = FrameDecimator(2)
        for _ in range(5):
            decimator.accept()
        assert decimator.counter == 5

        decimator.reset()

        assert decimator.counter == 0
        assert decimator.accept() is False
        assert decimator.accept() is True

    @pytest.mark.parametrize("bad", [0, -1, True, 2.5, "3", None])
    def test_rejects_invalid_skip(self, bad):
        with pytest.raises(ValueError):
            FrameDecimator(bad)
