import pytest

QtCore = pytest.importorskip("PyQt6.QtCore")

from courtshuffle.sync.qt_scheduler import QtScheduler  # noqa: E402


@pytest.fixture(scope="module")
def app():
    return QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])


def _run_loop(ms):
    loop = QtCore.QEventLoop()
    QtCore.QTimer.singleShot(ms, loop.quit)
    loop.exec()


def test_call_later_fires_once(app):
    scheduler = QtScheduler()
    fired = []
    handle = scheduler.call_later(0.01, lambda: fired.append("x"))

    _run_loop(100)

    assert fired == ["x"]
    assert not handle.active
    assert scheduler._handles == []


def test_call_every_stops_when_cancelled(app):
    scheduler = QtScheduler()
    fired = []
    handle = scheduler.call_every(0.01, lambda: fired.append("tick"))

    _run_loop(100)
    handle.cancel()
    count = len(fired)
    _run_loop(50)

    assert count >= 2
    assert len(fired) == count


def test_cancel_all(app):
    scheduler = QtScheduler()
    fired = []
    scheduler.call_later(0.02, lambda: fired.append("a"))
    scheduler.call_every(0.02, lambda: fired.append("b"))

    scheduler.cancel_all()
    _run_loop(80)

    assert fired == []
