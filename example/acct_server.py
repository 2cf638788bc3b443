#!/usr/bin/python
#
# Accounting server counting what radsim sends, to try the simulator
# locally:
#
#   python example/acct_server.py
#   radsim --number 20 --interim 10 --threshold 20
#
import asyncio
import collections
import logging

from pyrad.packet import AccessReject
from pyrad.server import RemoteHost
from pyrad.server_async import ServerAsync

from radsim.transport import default_dictionary

logging.basicConfig(level="INFO",
                    format="%(asctime)s [%(levelname)-8s] %(message)s")


class CountingServer(ServerAsync):

    def __init__(self, loop, dictionary):
        ServerAsync.__init__(self, loop=loop, dictionary=dictionary,
                             enable_pkt_verify=True)
        self.counters = collections.Counter()
        self.open_sessions = set()

    def handle_acct_packet(self, protocol, pkt, addr):
        status = pkt['Acct-Status-Type'][0]
        session_id = pkt['Acct-Session-Id'][0]
        self.counters[status] += 1
        if status == 'Start':
            self.open_sessions.add(session_id)
        elif status == 'Stop':
            self.open_sessions.discard(session_id)

        reply = self.CreateReplyPacket(pkt)
        protocol.send_response(reply, addr)

    def handle_auth_packet(self, protocol, pkt, addr):
        reply = self.CreateReplyPacket(pkt)
        reply.code = AccessReject
        protocol.send_response(reply, addr)

    def handle_coa_packet(self, protocol, pkt, addr):
        pass

    def handle_disconnect_packet(self, protocol, pkt, addr):
        pass

    async def report(self, interval=10):
        while True:
            await asyncio.sleep(interval)
            logging.info('%s, %d sessions open', dict(self.counters),
                         len(self.open_sessions))


if __name__ == '__main__':

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    server = CountingServer(loop=loop, dictionary=default_dictionary())
    server.hosts["127.0.0.1"] = RemoteHost("127.0.0.1", b"testing123",
                                           "localhost")

    loop.run_until_complete(server.initialize_transports(enable_acct=True))
    reporter = loop.create_task(server.report())
    try:
        loop.run_forever()
    except KeyboardInterrupt:
        pass
    reporter.cancel()
    loop.run_until_complete(server.deinitialize_transports())
    logging.info('Final: %s, %d sessions left open', dict(server.counters),
                 len(server.open_sessions))
    loop.close()
