import random
import re
import unittest
import uuid

from netaddr import EUI

from radsim import tools

MAC_RE = re.compile(r'^([0-9a-f]{2}:){5}[0-9a-f]{2}$')


class MacTests(unittest.TestCase):

    def testFormat(self):
        rng = random.Random(1)
        for _ in range(50):
            self.failUnlessMac(tools.generate_mac(rng))

    def failUnlessMac(self, mac):
        self.assertTrue(MAC_RE.match(mac), mac)

    def testLocallyAdministeredUnicast(self):
        rng = random.Random(2)
        for _ in range(50):
            first = EUI(tools.generate_mac(rng)).words[0]
            self.assertEqual(first & 0x02, 0x02)
            self.assertEqual(first & 0x01, 0)

    def testSeeded(self):
        self.assertEqual(tools.generate_mac(random.Random(3)),
                         tools.generate_mac(random.Random(3)))

    def testDefaultGenerator(self):
        self.failUnlessMac(tools.generate_mac())

    def testUniqueMac(self):
        self.failUnlessMac(tools.UNIQUE_MAC)


class StringTests(unittest.TestCase):

    def testLength(self):
        self.assertEqual(len(tools.rand_string(random.Random(1), 5)), 5)
        self.assertEqual(tools.rand_string(random.Random(1), 0), '')

    def testLetters(self):
        value = tools.rand_string(random.Random(1), 200)
        self.assertTrue(value.isalpha())
        self.assertTrue(all(c in tools.LETTERS for c in value))


class SessionIdTests(unittest.TestCase):

    def testInitialSessionId(self):
        value = tools.initial_session_id(random.Random(1))
        self.assertEqual(uuid.UUID(value).version, 4)

    def testNewSessionId(self):
        value, suffix = tools.new_session_id(random.Random(1)).rsplit(':', 1)
        self.assertEqual(uuid.UUID(value).version, 4)
        self.assertEqual(len(suffix), 5)
        self.assertTrue(suffix.isalpha())

    def testSessionIdsDiffer(self):
        rng = random.Random(1)
        ids = set(tools.new_session_id(rng) for _ in range(100))
        self.assertEqual(len(ids), 100)

    def testCalledStationId(self):
        mac, suffix = tools.called_station_id(random.Random(1)).rsplit(':', 1)
        self.assertTrue(MAC_RE.match(mac))
        self.assertEqual(len(suffix), 5)
