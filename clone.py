"""
End-to-end clone run.

CloneRunner walks CONNECTING -> SCANNING -> PREPARING -> COPYING and ends in
DONE or FAILED. It never exits the process: the outcome comes back as a
CloneResult and the caller decides the exit status.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from connector import close, connect
from data_transfer import CopyTask, copy_collection
from errors import CloneError, UnclassifiedError
from inventory import scan
from prepare import prepare_target
from progress import ProgressTracker, make_progress_bar
from utils import CLONE_BATCH_SIZE, gather_or_cancel, logger


class CloneState(Enum):
    CONNECTING = "connecting"
    SCANNING = "scanning"
    PREPARING = "preparing"
    COPYING = "copying"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CloneResult:
    state: CloneState
    total: int = 0
    copied: int = 0
    error: Optional[CloneError] = None

    @property
    def ok(self):
        return self.state is CloneState.DONE


class CloneRunner:
    def __init__(self, source_url, target_url, force_drop=False,
                 batch_size=CLONE_BATCH_SIZE, progress_bar=make_progress_bar):
        self.source_url = source_url
        self.target_url = target_url
        self.force_drop = force_drop
        self.batch_size = batch_size
        self.progress_bar = progress_bar

        self.state = None
        self.transitions = []
        self.tracker = None
        self.inventory = None
        self.source = None
        self.target = None

    def _transition(self, state):
        logger.info(f"State: {self.state.name if self.state else 'START'} -> {state.name}")
        self.state = state
        self.transitions.append(state)

    async def run(self):
        try:
            return await self._run()
        except CloneError as e:
            return self._fail(e)
        except Exception as e:
            logger.exception(f"Unexpected error during clone: {e}")
            return self._fail(UnclassifiedError(e))
        finally:
            await self._close_handles()

    async def _run(self):
        self._transition(CloneState.CONNECTING)
        self.source = await connect(self.source_url)
        self.target = await connect(self.target_url)

        self._transition(CloneState.SCANNING)
        self.inventory = await scan(self.source)

        self._transition(CloneState.PREPARING)
        await prepare_target(self.target, self.force_drop)

        if self.inventory.total == 0:
            # No insert will ever arrive, so there is nothing to wait for
            logger.info("Source holds no documents to copy")
            self._transition(CloneState.DONE)
            return CloneResult(CloneState.DONE)

        self._transition(CloneState.COPYING)
        copied = await self._copy_all()

        self._transition(CloneState.DONE)
        return CloneResult(CloneState.DONE, total=self.inventory.total, copied=copied)

    async def _copy_all(self):
        total = self.inventory.total
        bar = self.progress_bar(total)
        self.tracker = ProgressTracker(total, bar=bar)

        async def copy_then_close():
            await gather_or_cancel([
                copy_collection(CopyTask(name, self.source, self.target), self.tracker, self.batch_size)
                for name in self.inventory.names
            ])
            self.tracker.close()

        try:
            copied, _ = await gather_or_cancel([self.tracker.run(), copy_then_close()])
        finally:
            bar.close()
        return copied

    def _fail(self, error):
        logger.error(f"Clone failed in state {self.state.name if self.state else 'START'}: {error}")
        self._transition(CloneState.FAILED)
        total = self.inventory.total if self.inventory else 0
        copied = self.tracker.count if self.tracker else 0
        return CloneResult(CloneState.FAILED, total=total, copied=copied, error=error)

    async def _close_handles(self):
        for handle in (self.source, self.target):
            try:
                await close(handle)
            except Exception as e:
                logger.warning(f"Closing connection failed: {e}")
