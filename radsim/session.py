# session.py
#
# Simulated accounting session state

__docformat__ = "epytext en"

from enum import Enum

from radsim import tools

# Acct-Input-Octets and friends are 32 bit integers on the wire, the
# overflow goes into the Gigawords attributes (RFC 2869).
OCTETS_WRAP = 2 ** 32


class SessionError(Exception):
    """Raised when a session is asked for a transition its current state
    does not allow."""


class AcctStatus(Enum):
    START = 'Start'
    INTERIM_UPDATE = 'Interim-Update'
    STOP = 'Stop'

    def __str__(self):
        return self.value


class Session:
    """One simulated device and its accounting counters.

    A session is created in the Start state with zeroed counters. It is
    mutated only by the engine running inside the session's own scheduler
    task, so no locking is needed.

    :ivar status: status last sent or about to be sent
    :type status: AcctStatus
    :ivar force_stop_pending: a Stop for the previous, overlapping
                              session identity is still owed
    :type force_stop_pending: bool
    """

    def __init__(self, calling_station_id, called_station_id, nas_port_id,
                 acct_session_id, user_name=None):
        self.user_name = user_name or calling_station_id
        self.calling_station_id = calling_station_id
        self.called_station_id = called_station_id
        self.nas_port_id = nas_port_id

        self.status = AcctStatus.START
        self.acct_session_id = acct_session_id
        self.input_octets = 0
        self.output_octets = 0
        self.session_time = 0

        self.previous_acct_session_id = None
        self.previous_input_octets = 0
        self.previous_output_octets = 0
        self.previous_session_time = 0
        self.force_stop_pending = False

    def add_usage(self, rng, interim):
        """Grow the counters by one interim worth of traffic.

        Octet increments are drawn independently and are large compared
        to the interim so the volume per session varies a lot.
        """
        self.input_octets += rng.randrange(interim * 100)
        self.output_octets += rng.randrange(interim * 100)
        self.session_time += interim

    def restart(self, acct_session_id):
        """Begin a brand new logical session."""
        self.status = AcctStatus.START
        self.acct_session_id = acct_session_id
        self.input_octets = 0
        self.output_octets = 0
        self.session_time = 0

    def begin_overlap(self, acct_session_id):
        """Start a new logical session while the current one stays open.

        The current identity and counters are remembered so that the next
        transition can send the Stop for it.
        """
        if self.force_stop_pending:
            raise SessionError('Session %s already has an overlapping session'
                               ' pending' % self.calling_station_id)

        self.previous_acct_session_id = self.acct_session_id
        self.previous_input_octets = self.input_octets
        self.previous_output_octets = self.output_octets
        self.previous_session_time = self.session_time
        self.restart(acct_session_id)
        self.force_stop_pending = True

    def close_overlap(self, rng, interim):
        """Switch to the Stop of the overlapped session.

        The final counters are the remembered ones plus one more interim of
        usage. The current and previous session ids are swapped so that the
        session started by the overlap is remembered.
        """
        if not self.force_stop_pending:
            raise SessionError('Session %s has no overlapping session'
                               % self.calling_station_id)

        self.status = AcctStatus.STOP
        self.input_octets = self.previous_input_octets
        self.output_octets = self.previous_output_octets
        self.session_time = self.previous_session_time
        self.add_usage(rng, interim)
        self.acct_session_id, self.previous_acct_session_id = \
            self.previous_acct_session_id, self.acct_session_id
        self.previous_input_octets = 0
        self.previous_output_octets = 0
        self.previous_session_time = 0

    def resume_overlap(self, rng, interim):
        """Go back to reporting Interim-Updates for the session started by
        the overlap, once the Stop of the old one has been sent."""
        if not self.force_stop_pending:
            raise SessionError('Session %s has no overlapping session'
                               % self.calling_station_id)

        self.status = AcctStatus.INTERIM_UPDATE
        self.add_usage(rng, interim)
        self.acct_session_id = self.previous_acct_session_id
        self.force_stop_pending = False

    def force_stop(self):
        self.status = AcctStatus.STOP

    def drop_overlap(self):
        """Make the other identity of a pending overlap the current one,
        with its remembered counters, and forget the overlap."""
        if not self.force_stop_pending:
            raise SessionError('Session %s has no overlapping session'
                               % self.calling_station_id)

        self.acct_session_id, self.previous_acct_session_id = \
            self.previous_acct_session_id, self.acct_session_id
        self.input_octets = self.previous_input_octets
        self.output_octets = self.previous_output_octets
        self.session_time = self.previous_session_time
        self.previous_input_octets = 0
        self.previous_output_octets = 0
        self.previous_session_time = 0
        self.force_stop_pending = False

    def attributes(self):
        """Accounting-Request attributes for the current state.

        :return: attribute name and value pairs, in sending order
        :rtype:  list of tuples
        """
        attrs = [
            ('User-Name', self.user_name),
            ('Calling-Station-Id', self.calling_station_id),
            ('Called-Station-Id', self.called_station_id),
            ('Acct-Status-Type', self.status.value),
            ('Acct-Input-Octets', self.input_octets % OCTETS_WRAP),
            ('Acct-Output-Octets', self.output_octets % OCTETS_WRAP),
            ('Acct-Session-Time', self.session_time % OCTETS_WRAP),
            ('Acct-Session-Id', self.acct_session_id),
            ('NAS-Port', int(self.nas_port_id)),
        ]
        if self.input_octets >= OCTETS_WRAP:
            attrs.append(('Acct-Input-Gigawords',
                          self.input_octets // OCTETS_WRAP))
        if self.output_octets >= OCTETS_WRAP:
            attrs.append(('Acct-Output-Gigawords',
                          self.output_octets // OCTETS_WRAP))
        return attrs

    def __repr__(self):
        return 'Session(%s, status=%s, acct_session_id=%s)' % (
            self.calling_station_id, self.status, self.acct_session_id)


def create_session(rng, nas_port_id, unique_mac=False):
    """Create a session with a fresh identity.

    :param rng: random generator used for the identity
    :type  rng: random.Random
    :param unique_mac: share the same Calling-Station-Id between all
                       sessions
    :type  unique_mac: bool
    """
    if unique_mac:
        calling_station_id = tools.UNIQUE_MAC
    else:
        calling_station_id = tools.generate_mac(rng)

    return Session(calling_station_id,
                   tools.called_station_id(rng),
                   nas_port_id,
                   tools.initial_session_id(rng))
