import threading

import pytest

from conftest import wait_until
from spyglass_pyside.workers.service_worker import ServiceWorker


@pytest.fixture
def service_worker():
    w = ServiceWorker()
    yield w
    w.shutdown()


def test_result_delivered_on_owner_thread(service_worker):
    results = []
    threads = []

    def on_finished(value):
        results.append(value)
        threads.append(threading.current_thread())

    service_worker.submit(lambda a, b: a + b, 2, 3, on_finished=on_finished)
    assert wait_until(lambda: results)
    assert results == [5]
    assert threads == [threading.main_thread()]
    assert service_worker.pending_count() == 0


def test_exception_becomes_error_message(service_worker):
    errors = []

    def boom():
        raise ValueError("bad path")

    service_worker.submit(boom, on_error=errors.append)
    assert wait_until(lambda: errors)
    assert errors == ["bad path"]


def test_error_without_handler_is_logged_not_raised(service_worker):
    def boom():
        raise RuntimeError()

    service_worker.submit(boom)
    assert wait_until(lambda: service_worker.pending_count() == 0)


def test_completions_after_shutdown_are_dropped():
    worker = ServiceWorker()
    release = threading.Event()
    results = []
    worker.submit(lambda: release.wait(2) and "late", on_finished=results.append)
    worker.shutdown()
    release.set()
    worker.submit(lambda: "ignored", on_finished=results.append)
    assert not wait_until(lambda: results, timeout=0.2)
    assert worker.pending_count() == 0
