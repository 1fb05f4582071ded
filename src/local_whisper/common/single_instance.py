"""
Single instance enforcement for local-whisper.

Only one transcription may run at a time on a machine. A lock file at a
well-known path holds the owner's PID; a lock whose owner is no longer
alive is stale and gets replaced. With force, a live owner is sent SIGTERM
and its lock is taken over.

The lock file is published with an exclusive create and already holds the
PID when it becomes visible, so no instance reads a half-written lock. The
stale check and its unlink are not atomic with respect to each other.
"""

import atexit
import logging
import os
import signal
import sys
import time
from pathlib import Path
from typing import Protocol

from local_whisper.common.errors import LockHeldError, TranscribeError

logger = logging.getLogger(__name__)

# Bounds the stale-cleanup/recreate loop when other instances keep racing us
MAX_ACQUIRE_ATTEMPTS = 5
TAKEOVER_POLL_INTERVAL = 0.05

RELEASE_SIGNALS = ("SIGINT", "SIGTERM", "SIGUSR1", "SIGUSR2")


class ProcessProbe(Protocol):
    """Platform hooks for inspecting and stopping the lock holder."""

    def is_process_alive(self, pid: int) -> bool: ...

    def terminate(self, pid: int) -> None: ...


class SignalProcessProbe:
    """POSIX probe: signal 0 checks existence without touching the target."""

    def is_process_alive(self, pid: int) -> bool:
        if pid <= 0:
            return False
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists, but belongs to another user
            return True
        except OSError:
            return False
        return True

    def terminate(self, pid: int) -> None:
        os.kill(pid, signal.SIGTERM)


class WindowsProcessProbe:
    """Windows probe: os.kill would terminate the target, so query it instead."""

    PROCESS_QUERY_LIMITED_INFORMATION = 0x1000
    STILL_ACTIVE = 259

    def is_process_alive(self, pid: int) -> bool:
        if pid <= 0:
            return False

        import ctypes
        import ctypes.wintypes

        kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        handle = kernel32.OpenProcess(
            self.PROCESS_QUERY_LIMITED_INFORMATION, False, pid
        )
        if not handle:
            return False
        try:
            exit_code = ctypes.wintypes.DWORD()
            if not kernel32.GetExitCodeProcess(handle, ctypes.byref(exit_code)):
                return False
            return exit_code.value == self.STILL_ACTIVE
        finally:
            kernel32.CloseHandle(handle)

    def terminate(self, pid: int) -> None:
        os.kill(pid, signal.SIGTERM)


def get_process_probe() -> ProcessProbe:
    """Return the probe for the current platform."""
    if sys.platform == "win32":
        return WindowsProcessProbe()
    return SignalProcessProbe()


class InstanceLock:
    """
    PID lock file shared by all local-whisper instances.

    States, from this process's point of view: unlocked, locked by self,
    locked by another live process, locked by a dead process (stale).
    """

    def __init__(
        self,
        lock_path: Path,
        pid: int | None = None,
        probe: ProcessProbe | None = None,
        takeover_wait: float = 0.5,
    ):
        """
        Initialize the lock.

        Args:
            lock_path: Location of the lock file
            pid: Identifier written into the lock (defaults to this process)
            probe: Liveness/termination hooks (defaults to the platform probe)
            takeover_wait: Seconds to wait for a forcibly terminated holder
        """
        self.lock_path = Path(lock_path)
        self.pid = pid if pid is not None else os.getpid()
        self.probe = probe or get_process_probe()
        self.takeover_wait = takeover_wait

    def read_owner(self) -> int | None:
        """
        Read the PID stored in the lock file.

        Returns:
            The PID, or None if the content is not a positive integer

        Raises:
            OSError: If the file is missing or unreadable
        """
        content = self.lock_path.read_text(encoding="utf-8").strip()
        try:
            pid = int(content)
        except ValueError:
            return None
        return pid if pid > 0 else None

    def acquire(self, force: bool = False) -> None:
        """
        Take the lock for this process.

        Args:
            force: Terminate a live holder and take over its lock

        Raises:
            LockHeldError: If a live process holds the lock and force is False
            TranscribeError: If the lock file cannot be written or removed,
                or other instances keep replacing it
        """
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TranscribeError(
                f"Cannot create lock directory {self.lock_path.parent}: {e}"
            ) from e

        for _ in range(MAX_ACQUIRE_ATTEMPTS):
            try:
                created = self._create()
            except OSError as e:
                raise TranscribeError(
                    f"Cannot write lock file {self.lock_path}: {e}"
                ) from e
            if created:
                logger.debug(f"Acquired lock {self.lock_path} (PID: {self.pid})")
                return

            try:
                owner = self.read_owner()
            except FileNotFoundError:
                # Released between our create attempt and the read
                continue
            except OSError as e:
                logger.warning(f"Cannot read lock file, treating as stale: {e}")
                self._remove()
                continue

            if owner is None:
                logger.warning("Removing lock file with invalid content")
                self._remove()
                continue

            if owner == self.pid:
                logger.debug(f"Lock {self.lock_path} already held by this process")
                return

            if self.probe.is_process_alive(owner):
                if not force:
                    raise LockHeldError(owner)
                self._take_over(owner)
            else:
                logger.warning(f"Removing stale lockfile from dead process (PID: {owner})")
            self._remove()

        raise TranscribeError(
            f"Could not acquire lock {self.lock_path}: other instances kept "
            f"replacing it ({MAX_ACQUIRE_ATTEMPTS} attempts)"
        )

    def release(self) -> None:
        """
        Remove the lock file if this process owns it.

        Safe to call repeatedly and from signal/exit handlers; never raises.
        """
        try:
            if self.read_owner() == self.pid:
                self.lock_path.unlink()
                logger.debug(f"Released lock {self.lock_path}")
        except FileNotFoundError:
            pass
        except Exception as e:
            logger.debug(f"Ignoring lock release error: {e}")

    def _create(self) -> bool:
        """Atomically create the lock file with our PID; False if it exists."""
        tmp_path = self.lock_path.with_name(f"{self.lock_path.name}.{self.pid}.tmp")
        try:
            tmp_path.write_text(str(self.pid), encoding="utf-8")
            try:
                # Hard link fails if the target exists, and the content is
                # already complete when the lock becomes visible.
                os.link(tmp_path, self.lock_path)
                return True
            except FileExistsError:
                return False
            except OSError as e:
                logger.debug(f"Hard link unavailable ({e}), using exclusive create")
                return self._create_exclusive()
        finally:
            tmp_path.unlink(missing_ok=True)

    def _create_exclusive(self) -> bool:
        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(str(self.pid))
        return True

    def _remove(self) -> None:
        try:
            self.lock_path.unlink(missing_ok=True)
        except OSError as e:
            raise TranscribeError(
                f"Cannot remove lock file {self.lock_path}: {e}"
            ) from e

    def _take_over(self, owner: int) -> None:
        """Terminate the holder and wait briefly for it to exit."""
        try:
            self.probe.terminate(owner)
            logger.warning(f"Killed existing whisper process (PID: {owner})")
        except ProcessLookupError:
            pass
        except OSError as e:
            logger.warning(f"Could not terminate PID {owner}: {e}")

        deadline = time.monotonic() + self.takeover_wait
        while time.monotonic() < deadline and self.probe.is_process_alive(owner):
            time.sleep(TAKEOVER_POLL_INTERVAL)


def install_release_handlers(lock: InstanceLock) -> None:
    """
    Release the lock on interpreter exit and on termination signals.

    Signal handlers exit with status 1; the resulting SystemExit also
    unwinds any running subprocess.run call, which kills its child.
    """
    atexit.register(lock.release)

    def _on_signal(signum, frame) -> None:
        logger.info(f"Received signal {signum}, releasing lock")
        lock.release()
        sys.exit(1)

    for name in RELEASE_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, _on_signal)
