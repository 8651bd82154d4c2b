"""Timer scheduling for periodic QR rotation."""
import threading

class ThreadingScheduler:
    """
    Runs callbacks after a delay on daemon timer threads.

    Each callback runs inside the Flask application context so it can
    reach the database.
    """

    def __init__(self, app=None):
        self.app = app

    def call_later(self, delay: float, callback) -> threading.Timer:
        """Schedule callback once after delay seconds. The returned timer has cancel()."""
        timer = threading.Timer(delay, self._run, args=(callback,))
        timer.daemon = True
        timer.start()
        return timer

    def _run(self, callback) -> None:
        if self.app is None:
            callback()
            return

        with self.app.app_context():
            callback()
