import os
import json
import fcntl
import logging
from contextlib import contextmanager
from threading import Lock

from services.errors import LedgerCorruptedError, LedgerWriteError
from utils.files import atomic_write

USED = 'used'
UNUSED = 'unused'

logger = logging.getLogger(__name__)


class LedgerStore:
    """
    Durable selector ledger: {file: {selector: "used" | "unused"}}.

    The whole file is read, merged and rewritten per call. Writers serialize
    on a process-local lock and an advisory exclusive flock on a sidecar
    ``.lock`` file, so separate worker processes do not lose updates either.
    """

    def __init__(self, path):
        self.path = path
        self.lock_path = f'{path}.lock'
        self.lock = Lock()

    def load(self):
        """
        Read the ledger from disk.

        Returns:
            dict: Empty when no ledger has been written yet.

        Raises:
            LedgerCorruptedError: the file exists but is not a valid ledger.
        """
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise LedgerCorruptedError(f'Could not read ledger: {e}') from e

        if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
            raise LedgerCorruptedError('Ledger is not an object of objects')
        for selectors in data.values():
            if any(status not in (USED, UNUSED) for status in selectors.values()):
                raise LedgerCorruptedError('Ledger contains an unknown status')
        return data

    def save(self, ledger):
        """Atomically replace the ledger file"""
        try:
            atomic_write(self.path, json.dumps(ledger, indent=4, ensure_ascii=False), mode=0o600)
        except OSError as e:
            raise LedgerWriteError(f'Could not save ledger: {e}') from e

    @contextmanager
    def transaction(self):
        """
        Critical section for load-merge-save.

        Yields the loaded ledger; it is saved when the block exits normally
        and discarded if the block raises.
        """
        with self.lock:
            os.makedirs(os.path.dirname(os.path.abspath(self.lock_path)), exist_ok=True)
            with open(self.lock_path, 'a') as lock_file:
                fcntl.flock(lock_file, fcntl.LOCK_EX)
                try:
                    ledger = self.load()
                    yield ledger
                    self.save(ledger)
                    logger.debug("Ledger saved with %d files", len(ledger))
                finally:
                    fcntl.flock(lock_file, fcntl.LOCK_UN)
