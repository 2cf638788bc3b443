# engine.py
#
# Accounting state machine of a simulated session

__docformat__ = "epytext en"

import asyncio
import logging

from radsim import tools
from radsim.session import AcctStatus
from radsim.transport import TransportError


class TransitionEngine:
    """Decides and sends the accounting records of sessions.

    The engine itself keeps no per-session state: everything lives in the
    L{Session} passed to each call, so one engine is shared by the whole
    fleet.

    :ivar config: run configuration
    :type config: radsim.config.Config
    :ivar transport: object with an C{exchange(attributes, timeout)}
                     coroutine, normally a L{radsim.transport.AcctClient}
    """

    def __init__(self, config, transport, logger=None):
        self.config = config
        self.transport = transport
        self.logger = logger or logging.getLogger('radsim')

    async def emit(self, session):
        """Send the accounting record for the current state of a session.

        :return: the server reply, None when the exchange failed
        :rtype:  radsim.transport.Reply
        """
        self.logger.debug('%s %s', session.status, session.calling_station_id)
        try:
            reply = await self.transport.exchange(session.attributes(),
                                                  self.config.timeout)
        except TransportError as exc:
            self.logger.error('%s : %s : %s', session.calling_station_id,
                              session.status, exc)
            return None

        self.logger.info('%s : %s : %s', session.calling_station_id,
                         session.status, reply.status)
        return reply

    def decide(self, session, rng):
        """Move a session to the state of its next accounting record.

        :param session: session that just sent its current record
        :type  session: radsim.session.Session
        :param     rng: random generator of the session
        :type      rng: random.Random
        :return: True when a new session was started on top of the current
                 one and its Start has to be sent right away
        :rtype:  bool
        """
        config = self.config
        interim = config.interim

        if session.force_stop_pending:
            if session.status == AcctStatus.STOP:
                # Stop of the old session is sent, go on with the new one
                session.resume_overlap(rng, interim)
            else:
                session.close_overlap(rng, interim)
            return False

        if session.status == AcctStatus.STOP:
            session.restart(tools.new_session_id(rng))
            return False

        n = rng.randrange(100)
        if not config.randomize or n < 100 - config.stop_threshold:
            session.status = AcctStatus.INTERIM_UPDATE
            session.add_usage(rng, interim)
            return False

        if config.start_before_stop:
            session.begin_overlap(tools.new_session_id(rng))
            return True

        session.status = AcctStatus.STOP
        session.add_usage(rng, interim)
        return False

    async def tick(self, session, rng, sleep=asyncio.sleep):
        """Run one scheduled step of a session.

        The current record is sent, then the session moves on. A failed
        exchange leaves the session untouched so the next tick sends the
        same record again.

        When a new session is started before the Stop of the current one,
        the Start is sent within this tick after a random delay of up to
        one interim, so two exchanges happen in a single tick.

        :param sleep: coroutine function used for the overlap delay, a true
                      result means the session is being stopped and the
                      new Start is not sent
        :return: number of successful exchanges
        :rtype:  integer
        """
        if await self.emit(session) is None:
            return 0

        if not self.decide(session, rng):
            return 1

        if await sleep(rng.randrange(self.config.interim)):
            return 1
        if await self.emit(session) is None:
            return 1

        self.decide(session, rng)
        return 2
