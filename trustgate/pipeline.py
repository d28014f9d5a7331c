"""A pool of worker threads that send HTTP requests."""

from __future__ import annotations

import functools
import queue
import threading
from concurrent.futures import Future
from typing import Any

import httpx

_STOP = object()


@functools.lru_cache(maxsize=None)
def _shared_client() -> httpx.Client:
    return httpx.Client(timeout=10.0, limits=httpx.Limits(max_connections=10000))


class RequestPipeline:
    """Sends submitted requests through a fixed number of worker threads."""

    def __init__(self, workers: int, batch_size: int, client: httpx.Client | None = None) -> None:
        self.workers = workers
        self.batch_size = batch_size
        self.client = client if client is not None else _shared_client()
        self._requests: queue.Queue[Any] = queue.Queue(maxsize=batch_size * 2)
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._closed = False

    def start(self) -> None:
        for _ in range(self.workers):
            thread = threading.Thread(target=self._work, daemon=True)
            thread.start()
            self._threads.append(thread)

    def _work(self) -> None:
        while True:
            item = self._requests.get()
            if item is _STOP:
                return
            request, future = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(self.client.send(request))
            except Exception as exc:  # handed back to the submitter
                future.set_exception(exc)

    def submit(self, request: httpx.Request) -> httpx.Response:
        """Send a request through the pipeline and wait for its response."""
        future: Future[httpx.Response] = Future()
        with self._lock:
            if self._closed:
                raise RuntimeError("pipeline is stopped")
            self._requests.put((request, future))
        return future.result()

    def stop(self) -> None:
        """Stop accepting requests and wait for the workers to finish."""
        with self._lock:
            if self._closed:
                raise RuntimeError("pipeline already stopped")
            self._closed = True
            for _ in self._threads:
                self._requests.put(_STOP)
        for thread in self._threads:
            thread.join()

    def __enter__(self) -> RequestPipeline:
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()