import logging
import queue
import threading
from concurrent.futures import Executor, Future

logger = logging.getLogger(__name__)


class DaemonThreadPoolExecutor(Executor):
    """
    A ThreadPoolExecutor-like class whose worker threads are daemons.

    Background loads must never keep the process alive after the window is
    closed, and there is no way to abort a request already on the wire, so
    the pool simply lets daemon threads die with the interpreter.

    Implements ``submit`` and ``shutdown`` of the concurrent.futures.Executor
    interface, plus context management.
    """

    def __init__(self, max_workers=None, thread_name_prefix='SyncWorker'):
        if max_workers is None:
            max_workers = 4
        if max_workers <= 0:
            raise ValueError("max_workers must be greater than 0")

        self._max_workers = max_workers
        self._thread_name_prefix = thread_name_prefix
        self._work_queue = queue.Queue()
        self._threads = []
        self._shutdown = False
        self._lock = threading.Lock()

    def submit(self, fn, *args, **kwargs):
        """
        Schedule ``fn(*args, **kwargs)`` and return its Future.
        """
        with self._lock:
            if self._shutdown:
                raise RuntimeError('cannot schedule new futures after shutdown')

            f = Future()
            self._work_queue.put((fn, args, kwargs, f))
            self._adjust_thread_count()
        return f

    def _adjust_thread_count(self):
        # Eagerly grow up to max_workers; idle threads block on the queue
        if len(self._threads) < self._max_workers:
            t = threading.Thread(
                target=self._worker_loop,
                daemon=True,
                name=f"{self._thread_name_prefix}-{len(self._threads)}"
            )
            t.start()
            self._threads.append(t)

    def _worker_loop(self):
        while True:
            item = self._work_queue.get()
            if item is None:
                # Sentinel
                self._work_queue.task_done()
                break

            fn, args, kwargs, future = item
            try:
                if not future.set_running_or_notify_cancel():
                    continue
                try:
                    result = fn(*args, **kwargs)
                except BaseException as e:
                    logger.error(f"Background task {getattr(fn, '__name__', fn)} failed: {e}", exc_info=True)
                    future.set_exception(e)
                else:
                    future.set_result(result)
            finally:
                self._work_queue.task_done()

    def shutdown(self, wait=True, cancel_futures=False):
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True

            if cancel_futures:
                while True:
                    try:
                        item = self._work_queue.get_nowait()
                    except queue.Empty:
                        break
                    if item is not None:
                        item[3].cancel()
                    self._work_queue.task_done()

            for _ in self._threads:
                self._work_queue.put(None)
            threads = list(self._threads)

        if wait:
            for t in threads:
                t.join()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown(wait=True)
        return False
