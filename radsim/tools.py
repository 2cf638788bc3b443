# tools.py
#
# Identity generation helpers
from netaddr import EUI
from netaddr import mac_unix_expanded
import random
import string
import uuid

UNIQUE_MAC = '00:11:22:33:44:55'

LETTERS = string.ascii_lowercase + string.ascii_uppercase


def generate_mac(rng=None):
  """Generate a random, locally administered unicast MAC address.

  :param rng: random generator to draw from
  :type  rng: random.Random
  :return: lower case, colon separated hardware address
  :rtype:  string
  """
  rng = rng or random
  octets = [rng.randrange(256) for _ in range(6)]
  # locally administered, unicast
  octets[0] = (octets[0] | 0x02) & 0xfe
  value = 0
  for octet in octets:
    value = (value << 8) | octet
  return str(EUI(value, dialect=mac_unix_expanded))


def rand_string(rng=None, n=5):
  rng = rng or random
  return ''.join(rng.choice(LETTERS) for _ in range(n))


def new_session_id(rng=None):
  """Session identifier for a logical session started after the first one."""
  rng = rng or random
  session_uuid = uuid.UUID(int=rng.getrandbits(128), version=4)
  return '%s:%s' % (session_uuid, rand_string(rng, 5))


def initial_session_id(rng=None):
  rng = rng or random
  return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def called_station_id(rng=None):
  return '%s:%s' % (generate_mac(rng), rand_string(rng, 5))
