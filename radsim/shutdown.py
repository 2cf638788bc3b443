# shutdown.py
#
# Final Stop of every session when the simulation is terminated

import logging

from radsim.session import AcctStatus


class ShutdownCoordinator:
    """Closes sessions one after the other with a forced Stop.

    Sessions are handled strictly in sequence so the server sees a bounded
    load during shutdown and the stop log comes out in a stable order. A
    failing exchange is logged and does not prevent the next sessions from
    being closed.
    """

    def __init__(self, engine, logger=None, stop_logger=None):
        self.engine = engine
        self.logger = logger or logging.getLogger('radsim')
        self.stop_logger = stop_logger or logging.getLogger('radsim.stops')

    async def close(self, session):
        """Send the final Stop of one session.

        A session stopped between the setup of an overlapping session and
        its Start only closes the old identity. A session which still owes
        the Stop of an overlapping session gets a second Stop for that
        identity.

        :return: number of Stop records the server answered
        :rtype:  integer
        """
        if session.force_stop_pending and session.status == AcctStatus.START:
            session.drop_overlap()

        session.force_stop()
        answered = int(await self.engine.emit(session) is not None)
        self.stop_logger.info('Stop for %s', session.calling_station_id)

        if session.force_stop_pending:
            session.drop_overlap()
            answered += int(await self.engine.emit(session) is not None)
            self.stop_logger.info('Stop for %s', session.calling_station_id)
        return answered

    async def run(self, sessions):
        """Close all sessions.

        :param sessions: sessions to close, in order
        :type  sessions: list of radsim.session.Session
        :return: number of Stop records the server answered
        :rtype:  integer
        """
        answered = 0
        for session in sessions:
            answered += await self.close(session)
        self.logger.info('Sent Stop for %d sessions, %d answered',
                         len(sessions), answered)
        return answered
