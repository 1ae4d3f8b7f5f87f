"""
    Host access used by the probes.

    Everything the probes need from the machine (PATH lookups, file checks,
    directory listings, environment variables, running a tool) goes through a
    host object so the probes can be exercised against a fake machine in tests.
"""
import functools
import logging
import os
import queue
import shutil
import threading
import time

from core.models import ProbeResult
from helpers.process import get_evidence, run_cmd

logger = logging.getLogger(__name__)


class LocalHost:
    """The machine this process runs on. All queries are read-only."""

    def __init__(self, command_timeout_s: float = 10):
        self.command_timeout_s = command_timeout_s

    def which(self, name: str) -> str | None:
        try:
            return shutil.which(name)
        except OSError:
            return None

    def is_file(self, path: str) -> bool:
        try:
            return os.path.isfile(path)
        except (OSError, ValueError):
            return False

    def is_dir(self, path: str) -> bool:
        try:
            return os.path.isdir(path)
        except (OSError, ValueError):
            return False

    def list_dirs(self, path: str) -> list[str]:
        """Names of the immediate subdirectories of `path`, sorted. Unreadable -> []."""
        try:
            with os.scandir(path) as it:
                return sorted(entry.name for entry in it if entry.is_dir())
        except OSError as e:
            logger.debug("Cannot list %s: %s", path, e)
            return []

    def getenv(self, name: str) -> str | None:
        value = os.environ.get(name)
        return value if value else None

    def run(self, cmd: list[str]) -> tuple[int, str, str]:
        rc, stdout, stderr = run_cmd(cmd, timeout_s=self.command_timeout_s)
        logger.debug("Ran command: %s", get_evidence(cmd, rc, stdout, stderr))
        return rc, stdout, stderr


def probe(fn):
    """
    Fault isolation for a probe function.

    Any exception escaping the probe is a platform-query fault; it is logged and
    downgraded to ProbeResult.absent() so one broken query never stops the run.
    """
    @functools.wraps(fn)
    def wrapper(*args, **kwargs) -> ProbeResult:
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            logger.warning("Probe %s failed: %s: %s", fn.__name__, type(e).__name__, e)
            return ProbeResult.absent(error=f"{type(e).__name__}: {e}")

    return wrapper


def run_bounded(calls, timeout_s: float, workers: int = 1, name: str = "probe") -> dict:
    """
    Run zero-argument callables on daemon threads and collect their return
    values for at most `timeout_s` seconds.

    `workers` threads take calls in order, so workers=1 runs them one after
    another. Keys missing from the returned dict did not finish in time (or
    raised). Their threads are abandoned; being daemons they never hold up
    interpreter exit.
    """
    pending = list(calls.items())
    if not pending:
        return {}

    results = queue.Queue()
    lock = threading.Lock()

    def worker():
        while True:
            with lock:
                if not pending:
                    return
                key, fn = pending.pop(0)
            try:
                value = fn()
            except Exception as e:
                logger.warning("%s %s failed: %s: %s", name, key, type(e).__name__, e)
                results.put((key, None, False))
                continue
            results.put((key, value, True))

    for i in range(max(1, min(workers, len(pending)))):
        threading.Thread(target=worker, name=f"{name}-{i}", daemon=True).start()

    collected = {}
    answered = 0
    deadline = time.monotonic() + timeout_s
    while answered < len(calls):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        try:
            key, value, ok = results.get(timeout=remaining)
        except queue.Empty:
            break
        answered += 1
        if ok:
            collected[key] = value

    # calls not yet started are dropped
    with lock:
        pending.clear()
    return collected
