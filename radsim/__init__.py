"""RADIUS accounting traffic simulator.

radsim keeps a large number of simulated network devices alive against a
RADIUS accounting server. Every device logs on with an Accounting-Request
Start, reports its usage with Interim-Updates and eventually logs off with
a Stop, then starts over with a fresh session. When the process is
interrupted every open session is closed with a final Stop.

Here is an example of running a small fleet from python::

  import asyncio
  from radsim.config import Config
  from radsim.fleet import Fleet

  config = Config(host="radius.my.domain", secret="s3cr3t",
                  nb_clients=10, interim=60)
  fleet = Fleet(config)
  asyncio.run(fleet.run())

This package contains the following modules:

  - session: simulated accounting session state
  - engine: accounting state machine
  - scheduler: per session periodic driver
  - fleet: session creation, staggering and shutdown
  - shutdown: final Stop pass on termination
  - transport: accounting exchange on top of pyrad
  - tools: identity generation helpers
  - config: run configuration
  - cli: command line entry point
"""

__docformat__ = 'epytext en'

__url__ = 'https://github.com/radsim/radsim'
__version__ = '1.0'

__all__ = ['cli', 'config', 'engine', 'fleet', 'scheduler', 'session',
           'shutdown', 'tools', 'transport']
