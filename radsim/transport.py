# transport.py
#
# Accounting-Request exchange over UDP, packets are built by pyrad

__docformat__ = "epytext en"

import asyncio
import logging
import os
import random

from pyrad.dictionary import Dictionary
from pyrad.packet import Packet, AcctPacket, AccessAccept, AccessReject, \
    AccessRequest, AccessChallenge, AccountingRequest, AccountingResponse, \
    CoAACK, CoANAK, CoARequest, DisconnectACK, DisconnectNAK, \
    DisconnectRequest, StatusServer, StatusClient

DICTIONARY = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                          'dictionary')

CODE_NAMES = {
    AccessRequest: 'Access-Request',
    AccessAccept: 'Access-Accept',
    AccessReject: 'Access-Reject',
    AccountingRequest: 'Accounting-Request',
    AccountingResponse: 'Accounting-Response',
    AccessChallenge: 'Access-Challenge',
    StatusServer: 'Status-Server',
    StatusClient: 'Status-Client',
    DisconnectRequest: 'Disconnect-Request',
    DisconnectACK: 'Disconnect-ACK',
    DisconnectNAK: 'Disconnect-NAK',
    CoARequest: 'CoA-Request',
    CoAACK: 'CoA-ACK',
    CoANAK: 'CoA-NAK',
}


class TransportError(Exception):
    """An accounting exchange failed: socket error, no usable reply."""


class Timeout(TransportError):
    """Simple exception class which is raised when a timeout occurs
    while waiting for a RADIUS server to respond."""


def default_dictionary():
    """Load the RADIUS dictionary shipped with radsim."""
    return Dictionary(DICTIONARY)


class Reply:
    """Decoded answer of the accounting server.

    Only the code and the optional Reply-Message are kept, the simulation
    never looks further into replies.
    """

    def __init__(self, code, message=None):
        self.code = code
        self.message = message

    @classmethod
    def from_packet(cls, packet):
        message = None
        if 'Reply-Message' in packet:
            message = packet['Reply-Message'][0]
        return cls(packet.code, message)

    @property
    def status(self):
        status = CODE_NAMES.get(self.code, 'Code(%d)' % self.code)
        if self.message:
            status += ' (%s)' % self.message
        return status

    def __repr__(self):
        return 'Reply(%s)' % self.status


class DatagramProtocolClient(asyncio.DatagramProtocol):
    """Protocol of a single request/reply exchange.

    Each exchange gets its own socket, so the 8 bit RADIUS identifier never
    collides between the thousands of requests in flight.
    """

    def __init__(self, server, port, logger, request, future):
        self.transport = None
        self.server = server
        self.port = port
        self.logger = logger
        self.request = request
        self.future = future

    def connection_made(self, transport):
        self.transport = transport

    def send(self):
        self.transport.sendto(self.request.RequestPacket())

    def error_received(self, exc):
        self.logger.debug('[%s:%d] Error received: %s', self.server, self.port, exc)
        if not self.future.done():
            self.future.set_exception(
                TransportError('[%s:%d] %s' % (self.server, self.port, exc)))

    def connection_lost(self, exc):
        if exc:
            self.logger.warning('[%s:%d] Connection lost: %s', self.server, self.port, exc)

    # noinspection PyUnusedLocal
    def datagram_received(self, data, addr):
        try:
            reply = Packet(packet=data, dict=self.request.dict)
        except Exception as exc:
            self.logger.error('[%s:%d] Error on decode packet: %s', self.server, self.port, exc)
            return

        if reply.id != self.request.id:
            self.logger.warning('[%s:%d] Ignore reply with unexpected id %d', self.server, self.port, reply.id)
            return

        reply.secret = self.request.secret
        if not self.request.VerifyReply(reply, data):
            self.logger.warning('[%s:%d] Ignore invalid reply for id %d', self.server, self.port, reply.id)
            return

        if not self.future.done():
            self.future.set_result(reply)


class AcctClient:
    """Basic RADIUS accounting client.

    Sends Accounting-Requests to a RADIUS server, taking care of timeouts
    and retransmissions, and validates the replies.

    :ivar retries: number of times a request is sent before giving up
    :type retries: integer
    :ivar timeout: number of seconds to wait for an answer
    :type timeout: float
    """

    # noinspection PyShadowingBuiltins
    def __init__(self, server, acct_port=1813, secret=b'', dict=None,
                 retries=3, timeout=10, logger=None):
        """Constructor.

        :param    server: hostname or IP address of RADIUS server
        :type     server: string
        :param acct_port: port to use for accounting packets
        :type  acct_port: integer
        :param    secret: RADIUS secret
        :type     secret: bytes
        :param      dict: RADIUS dictionary, radsim's own when omitted
        :type       dict: pyrad.dictionary.Dictionary
        :param    logger: logger for transport events
        :type     logger: logging.Logger
        """
        self.server = server
        self.acct_port = acct_port
        self.secret = secret
        self.dict = dict if dict is not None else default_dictionary()
        self.retries = retries
        self.timeout = timeout
        self.logger = logger or logging.getLogger('radsim.transport')

        # Use cryptographic-safe random generator as provided by the OS.
        self._id_generator = random.SystemRandom()

    @classmethod
    def from_config(cls, config, logger=None):
        return cls(config.host, acct_port=config.port,
                   secret=config.secret_bytes, retries=config.retries,
                   timeout=config.timeout, logger=logger)

    def create_acct_packet(self, **args):
        """Create a new accounting packet.
        The packet is initialized with the dictionary and secret used for
        the client and a random identifier.

        :return: a new empty packet instance
        :rtype:  pyrad.packet.AcctPacket
        """
        return AcctPacket(id=self._id_generator.randrange(0, 256),
                          dict=self.dict, secret=self.secret, **args)

    async def exchange(self, attributes, timeout=None):
        """Send an Accounting-Request and wait for its reply.

        The request is sent again every C{timeout / retries} seconds until a
        valid reply arrives, with Acct-Delay-Time updated on every
        retransmission.

        :param attributes: attribute name and value pairs
        :type  attributes: list of tuples
        :param    timeout: seconds for the whole exchange, the client
                           default when omitted
        :type     timeout: float
        :return: the decoded reply
        :rtype:  Reply
        :raise Timeout: RADIUS server does not reply
        :raise TransportError: the request could not be sent
        """
        if timeout is None:
            timeout = self.timeout

        request = self.create_acct_packet()
        for name, value in attributes:
            request[name] = value

        loop = asyncio.get_running_loop()
        future = loop.create_future()
        protocol = DatagramProtocolClient(self.server, self.acct_port,
                                          self.logger, request, future)
        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: protocol, remote_addr=(self.server, self.acct_port))
        except OSError as exc:
            raise TransportError('[%s:%d] %s' % (self.server, self.acct_port, exc)) from exc

        interval = timeout / self.retries
        try:
            for attempt in range(self.retries):
                if attempt:
                    delay = int(attempt * interval)
                    request['Acct-Delay-Time'] = delay
                    self.logger.debug('[%s:%d] Retry %d for request %d', self.server,
                                      self.acct_port, attempt, request.id)
                try:
                    protocol.send()
                except OSError as exc:
                    raise TransportError('[%s:%d] %s' % (self.server, self.acct_port, exc)) from exc

                try:
                    reply = await asyncio.wait_for(asyncio.shield(future), interval)
                except asyncio.TimeoutError:
                    continue
                return Reply.from_packet(reply)
        finally:
            transport.close()

        raise Timeout('[%s:%d] No reply after %d attempts' % (
            self.server, self.acct_port, self.retries))
