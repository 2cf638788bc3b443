# fleet.py
#
# Creation, staggered start and shutdown of all simulated sessions

__docformat__ = "epytext en"

import asyncio
import logging
import random

from radsim.engine import TransitionEngine
from radsim.scheduler import SessionScheduler
from radsim.session import create_session
from radsim.shutdown import ShutdownCoordinator
from radsim.transport import AcctClient


class Fleet:
    """All simulated sessions of a run.

    The fleet creates the sessions, starts their schedulers spread over one
    interim so the server does not get a synchronized burst, and on
    shutdown stops every scheduler before handing the started sessions to
    the L{ShutdownCoordinator}.

    :ivar sessions: all sessions, in creation order
    :type sessions: list of radsim.session.Session
    :ivar schedulers: schedulers started so far
    :type schedulers: list of radsim.scheduler.SessionScheduler
    """

    def __init__(self, config, engine=None, logger=None, stop_logger=None):
        """Constructor.

        :param      config: validated run configuration
        :type       config: radsim.config.Config
        :param      engine: transition engine, one sending to the
                            configured server when omitted
        :type       engine: radsim.engine.TransitionEngine
        :param      logger: main logger
        :type       logger: logging.Logger
        :param stop_logger: logger recording the forced Stop of each session
        :type  stop_logger: logging.Logger
        """
        self.config = config
        self.logger = logger or logging.getLogger('radsim')
        if engine is None:
            transport = AcctClient.from_config(
                config, logger=self.logger.getChild('transport'))
            engine = TransitionEngine(config, transport, logger=self.logger)
        self.engine = engine
        self.coordinator = ShutdownCoordinator(engine, logger=self.logger,
                                               stop_logger=stop_logger)

        self.rng = self.seeded_rng('fleet')
        self.sessions = []
        self.schedulers = []
        self._shutdown_requested = asyncio.Event()
        self._tasks = []

    def seeded_rng(self, name):
        """Random generator reproducible when the configuration carries a
        seed. Every C{name} gets its own stream."""
        if self.config.seed is None:
            return random.Random()
        return random.Random('%d:%s' % (self.config.seed, name))

    def session_rng(self, index, purpose):
        """Random generator of the session at C{index}, one stream for its
        C{identity} and one for its C{tick} decisions."""
        return self.seeded_rng('%d:%s' % (index, purpose))

    def create_sessions(self):
        config = self.config
        self.sessions = [create_session(self.session_rng(index, 'identity'),
                                        config.nas_port,
                                        unique_mac=config.unique_mac)
                         for index in range(config.nb_clients)]
        self.logger.info('Created %d sessions', len(self.sessions))
        return self.sessions

    def start_delay(self):
        """Seconds to wait before starting the next session."""
        config = self.config
        if config.spread:
            return config.interim / config.nb_clients
        return self.rng.randrange(config.interim) / 1000.0

    async def start(self):
        """Start the scheduler of every session, one after the other."""
        for index, session in enumerate(self.sessions):
            scheduler = SessionScheduler(session, self.engine,
                                         self.config.interim,
                                         rng=self.session_rng(index, 'tick'),
                                         logger=self.logger)
            self.schedulers.append(scheduler)
            scheduler.start()
            await asyncio.sleep(self.start_delay())
        self.logger.info('All %d sessions started', len(self.schedulers))

    async def heartbeat(self):
        while True:
            await asyncio.sleep(self.config.heartbeat)
            running = sum(1 for scheduler in self.schedulers
                          if scheduler.running)
            self.logger.info('Heartbeat: %d of %d sessions running',
                             running, len(self.sessions))

    def request_shutdown(self):
        """Ask the fleet to shut down. Safe to call from a signal handler
        installed with C{loop.add_signal_handler}."""
        if not self._shutdown_requested.is_set():
            self.logger.info('Shutdown requested')
        self._shutdown_requested.set()

    async def run(self):
        """Run the simulation until shutdown is requested.

        :return: number of final Stop records the server answered
        :rtype:  integer
        """
        if not self.sessions:
            self.create_sessions()

        self._tasks = [asyncio.ensure_future(self.start()),
                       asyncio.ensure_future(self.heartbeat())]
        await self._shutdown_requested.wait()
        return await self.shutdown()

    async def shutdown(self):
        """Stop all schedulers then close every started session."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        await asyncio.gather(*[scheduler.stop()
                               for scheduler in self.schedulers],
                             return_exceptions=True)

        started = [scheduler.session for scheduler in self.schedulers]
        return await self.coordinator.run(started)
