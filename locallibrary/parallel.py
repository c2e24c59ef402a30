import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from flask import current_app

logger = logging.getLogger(__name__)


def parallel(**tasks):
    """Run independent reads concurrently and join them.

    Each task is a zero-argument callable and runs in its own application
    context, so it gets its own database session. Returns a dict mapping
    each keyword to its task's result. The first task to fail re-raises its
    exception here; tasks that have not started yet are cancelled and
    running ones are joined before returning.
    """
    if not tasks:
        return {}
    app = current_app._get_current_object()

    def run(fn):
        with app.app_context():
            return fn()

    workers = min(len(tasks), app.config.get('FANOUT_MAX_WORKERS', 4))
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='catalog-fanout')
    try:
        futures = {name: executor.submit(run, fn) for name, fn in tasks.items()}
        for future in as_completed(futures.values()):
            if future.exception() is not None:
                logger.debug("fan-out of %s failed", ", ".join(tasks))
                raise future.exception()
        return {name: future.result() for name, future in futures.items()}
    finally:
        # drop tasks not yet started, then join the running ones
        executor.shutdown(wait=True, cancel_futures=True)
