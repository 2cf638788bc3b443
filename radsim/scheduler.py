# scheduler.py
#
# Periodic driver of one simulated session

import asyncio
import logging
import random


class SessionScheduler:
    """Runs the ticks of one session in its own asyncio task.

    The first tick runs as soon as the scheduler starts, the next ones
    every C{interval} seconds. Missed slots are skipped when a tick takes
    longer than the interval. Ticks are awaited one after the other, so a
    session never has two ticks in flight.
    """

    def __init__(self, session, engine, interval, rng=None, logger=None):
        self.session = session
        self.engine = engine
        self.interval = interval
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger('radsim')
        self.ticks = 0
        self._stopping = asyncio.Event()
        self._task = None

    @property
    def running(self):
        return self._task is not None and not self._task.done()

    def start(self):
        if self._task is not None:
            raise RuntimeError('Scheduler for %s already started'
                               % self.session.calling_station_id)
        self._task = asyncio.ensure_future(self.run())
        return self._task

    async def wait(self, delay):
        """Sleep, waking up early when the scheduler is stopped.

        :return: True when the scheduler was stopped
        :rtype:  bool
        """
        if self._stopping.is_set():
            return True
        try:
            await asyncio.wait_for(self._stopping.wait(), delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self):
        loop = asyncio.get_running_loop()
        next_run = loop.time()
        while not self._stopping.is_set():
            try:
                await self.engine.tick(self.session, self.rng, sleep=self.wait)
            except Exception:
                self.logger.exception('Tick failed for %s',
                                      self.session.calling_station_id)
            self.ticks += 1

            next_run += self.interval
            now = loop.time()
            if next_run < now:
                missed = int((now - next_run) // self.interval) + 1
                next_run += missed * self.interval
            await self.wait(next_run - now)

    async def stop(self):
        """Stop ticking and wait for the tick in flight to complete."""
        self._stopping.set()
        if self._task is not None:
            await self._task
