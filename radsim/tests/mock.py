import asyncio
import random

from pyrad.packet import AccountingResponse

from radsim.transport import Reply
from radsim.transport import Timeout


class MockTransport:
    """Records the exchanges of the engine instead of sending them.

    :ivar requests: attributes of every exchange, as dicts
    :ivar failures: set of exchange numbers (0 based) which fail
    """

    def __init__(self, code=AccountingResponse, message=None, delay=0,
                 failures=(), fail=False):
        self.code = code
        self.message = message
        self.delay = delay
        self.failures = set(failures)
        self.fail = fail
        self.requests = []
        self.timeouts = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.completed = 0

    @property
    def statuses(self):
        return [request['Acct-Status-Type'] for request in self.requests]

    async def exchange(self, attributes, timeout=None):
        number = len(self.requests)
        self.requests.append(dict(attributes))
        self.timeouts.append(timeout)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail or number in self.failures:
                raise Timeout('Mock timeout')
            return Reply(self.code, self.message)
        finally:
            self.in_flight -= 1
            self.completed += 1


class MockSleep:

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class MockRandom(random.Random):
    """Always draws the highest value of a range."""

    def randrange(self, start, stop=None, step=1):
        if stop is None:
            return start - 1
        return stop - 1
