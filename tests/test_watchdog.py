import threading
import time

from appimagehelpers.watchdog import Watchdog


def test_callback_fires_after_interval():
    fired = threading.Event()
    dog = Watchdog(0.05, fired.set)
    assert fired.wait(2.0)
    dog.stop()


def test_stop_prevents_callback():
    fired = threading.Event()
    dog = Watchdog(0.2, fired.set)
    dog.stop()
    assert not fired.wait(0.5)


def test_kick_after_firing_restarts():
    hits = threading.Semaphore(0)
    dog = Watchdog(0.05, hits.release)
    assert hits.acquire(timeout=2.0)
    assert not hits.acquire(timeout=0.2)
    dog.kick()
    assert hits.acquire(timeout=2.0)
    dog.stop()
    assert not hits.acquire(timeout=0.2)


def test_kick_delays_callback():
    fired = threading.Event()
    start = time.monotonic()
    dog = Watchdog(0.3, fired.set)
    time.sleep(0.15)
    dog.kick()
    assert fired.wait(2.0)
    assert time.monotonic() - start >= 0.4
    dog.stop()


def test_stop_after_kick_cancels():
    fired = threading.Event()
    dog = Watchdog(0.2, fired.set)
    dog.kick()
    dog.stop()
    assert not fired.wait(0.5)