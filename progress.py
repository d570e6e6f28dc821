import asyncio
import sys

from tqdm import tqdm

from errors import WorkCountMismatchError
from utils import logger


DONE_LABEL = 'DONE'
BAR_FORMAT = ("📦  |{bar}| {percentage:3.0f}% | ETA: {remaining_s:.0f}s | "
              "{n_fmt}/{total_fmt} | Cloning: {desc}")

# End-of-stream marker placed on the queue by close()
_CLOSED = object()


def make_progress_bar(total):
    """Persistent progress bar shown while documents are copied."""
    return tqdm(total=total, bar_format=BAR_FORMAT, file=sys.stdout,
                dynamic_ncols=True, leave=True)


class StatusLine:
    """A single terminal line rewritten in place, used while scanning."""

    def __init__(self, file=None):
        self.file = file or sys.stdout
        self._width = 0

    def update(self, text):
        padding = ' ' * max(self._width - len(text), 0)
        self.file.write(f"\r{text}{padding}")
        self.file.flush()
        self._width = len(text)

    def finish(self):
        if self._width:
            self.file.write("\n")
            self.file.flush()
        self._width = 0


class ProgressTracker:
    """
    Owner of the global document counter.

    Copiers call report() from any task; run() is the only code that touches
    the counter, consuming one queued event per inserted document. The
    completion signal fires once, on the event that makes count equal total.
    """

    def __init__(self, total, bar=None):
        self.total = total
        self.count = 0
        self.label = None
        self.completions = 0
        self.completed = asyncio.Event()
        self._bar = bar
        self._queue = asyncio.Queue()

    def report(self, label):
        self._queue.put_nowait(label)

    def close(self):
        self._queue.put_nowait(_CLOSED)

    async def run(self):
        if self._bar is None:
            self._bar = make_progress_bar(self.total)
        try:
            while True:
                label = await self._queue.get()
                if label is _CLOSED:
                    break
                self._advance(label)
        finally:
            self._bar.close()

        if self.count != self.total:
            logger.error(f"Progress ended at {self.count}/{self.total}")
            raise WorkCountMismatchError(self.total, self.count)
        return self.count

    def _advance(self, label):
        self.count += 1
        self.label = label
        self._bar.set_description_str(label, refresh=False)
        self._bar.update(1)

        if self.count == self.total:
            self._bar.set_description_str(DONE_LABEL, refresh=True)
            self.completions += 1
            self.completed.set()
            logger.info(f"All {self.total} documents inserted")
