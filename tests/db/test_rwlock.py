from __future__ import annotations

import threading
import time

from kvcache.db import RWLock


def test_readers_share_the_lock() -> None:
    lock = RWLock()
    inside = threading.Barrier(3, timeout=2.0)

    def reader() -> None:
        with lock.read():
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    # All three parties meet only if both readers hold the lock at once.
    inside.wait()
    for thread in threads:
        thread.join()


def test_writer_excludes_readers() -> None:
    lock = RWLock()
    events: list[str] = []
    writer_in = threading.Event()

    def writer() -> None:
        with lock.write():
            writer_in.set()
            time.sleep(0.05)
            events.append("writer-done")

    def reader() -> None:
        writer_in.wait()
        with lock.read():
            events.append("reader")

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert events == ["writer-done", "reader"]
