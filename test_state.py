"""
Unit tests for the download admission gate.
"""

from imagehost.state import DownloadGate


class TestDownloadGate:
    def test_admits_up_to_limit(self):
        gate = DownloadGate(limit=3)
        assert [gate.try_acquire() for _ in range(4)] == [True, True, True, False]
        assert gate.active == 3
        assert gate.full

    def test_release_frees_exactly_one_slot(self):
        gate = DownloadGate(limit=2)
        gate.try_acquire()
        gate.try_acquire()

        gate.release()
        assert gate.try_acquire() is True
        assert gate.try_acquire() is False

    def test_release_never_goes_negative(self):
        gate = DownloadGate(limit=2)
        gate.release()
        gate.release()
        assert gate.active == 0
        assert not gate.full
