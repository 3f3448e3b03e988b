import logging
import threading

logger = logging.getLogger(__name__)

MUTATION_KINDS = ('childList', 'attributes')
TRIGGER_ATTRIBUTES = frozenset({'class', 'id'})


class ScanScheduler:
    """
    Runs scans on a fixed interval and shortly after relevant DOM mutations.

    Scans never overlap: a trigger that arrives while one is running is
    dropped.
    """

    def __init__(self, scan, interval=1.0, debounce=0.1, on_result=None):
        self.scan = scan
        self.interval = interval
        self.debounce = debounce
        self.on_result = on_result
        self.last_result = None

        self._lock = threading.Lock()
        self._running = False
        self._scanning = False
        self._interval_timer = None
        self._debounce_timer = None

    @property
    def running(self):
        return self._running

    def start(self):
        with self._lock:
            if self._running:
                return
            self._running = True
            self._schedule_tick()
        logger.info("Scan scheduler started (interval %.2fs)", self.interval)

    def stop(self):
        with self._lock:
            self._running = False
            for timer in (self._interval_timer, self._debounce_timer):
                if timer is not None:
                    timer.cancel()
            self._interval_timer = None
            self._debounce_timer = None
        logger.info("Scan scheduler stopped")

    def _schedule_tick(self):
        timer = threading.Timer(self.interval, self._on_tick)
        timer.daemon = True
        self._interval_timer = timer
        timer.start()

    def _on_tick(self):
        try:
            self.trigger()
        except Exception:
            logger.exception("Scheduled scan failed")
        with self._lock:
            if self._running:
                self._schedule_tick()

    def notify_mutation(self, kind, attribute=None):
        """
        Report a DOM mutation. Returns True when a debounced scan was scheduled.
        """
        if kind not in MUTATION_KINDS:
            return False
        if kind == 'attributes' and attribute not in TRIGGER_ATTRIBUTES:
            return False

        with self._lock:
            if not self._running:
                return False
            if self._debounce_timer is not None:
                self._debounce_timer.cancel()
            timer = threading.Timer(self.debounce, self._on_debounce)
            timer.daemon = True
            self._debounce_timer = timer
            timer.start()
        return True

    def _on_debounce(self):
        with self._lock:
            if self._debounce_timer is threading.current_thread():
                self._debounce_timer = None
        try:
            self.trigger()
        except Exception:
            logger.exception("Debounced scan failed")

    def trigger(self):
        """Scan now unless a scan is in flight; returns the result or None"""
        with self._lock:
            if self._scanning:
                logger.debug("Scan already running, trigger dropped")
                return None
            self._scanning = True

        try:
            result = self.scan()
        finally:
            with self._lock:
                self._scanning = False

        self.last_result = result
        if self.on_result is not None:
            self.on_result(result)
        return result
