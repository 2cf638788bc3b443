import asyncio
import io
import logging
import os
import signal
import tempfile
import unittest
from contextlib import redirect_stderr
from unittest import mock

from radsim import cli
from radsim.config import Config
from radsim.engine import TransitionEngine
from radsim.fleet import Fleet
from radsim.tests.mock import MockTransport


class SignalledFleet(Fleet):
    """Fleet sending to a mock server which gets a SIGTERM shortly after
    it starts running."""

    def __init__(self, config, logger=None, stop_logger=None):
        self.transport = MockTransport()
        Fleet.__init__(self, config,
                       engine=TransitionEngine(config, self.transport),
                       logger=logger, stop_logger=stop_logger)

    async def run(self):
        asyncio.get_running_loop().call_later(0.3, os.kill, os.getpid(),
                                              signal.SIGTERM)
        return await Fleet.run(self)


class ParserTests(unittest.TestCase):

    def testDefaults(self):
        config = cli.config_from_args(cli.build_parser().parse_args([]))
        self.assertEqual(config.host, '127.0.0.1')
        self.assertEqual(config.port, 1813)
        self.assertEqual(config.nb_clients, 500)
        self.assertEqual(config.interim, 360)
        self.assertEqual(config.stop_threshold, 2)
        self.assertEqual(config.randomize, True)
        self.assertEqual(config.spread, True)
        self.assertEqual(config.unique_mac, False)
        self.assertEqual(config.start_before_stop, False)

    def testFlags(self):
        args = cli.build_parser().parse_args([
            '--host', '10.0.0.1', '--port', '1646', '--secret', 's3cr3t',
            '--number', '3', '--interim', '60', '--nasport', '7',
            '--timeout', '2.5', '--no-random', '--threshold', '50',
            '--unique', '--no-spread', '--startstop', '--seed', '9'])
        config = cli.config_from_args(args).validate()
        self.assertEqual(config.host, '10.0.0.1')
        self.assertEqual(config.port, 1646)
        self.assertEqual(config.secret, 's3cr3t')
        self.assertEqual(config.nb_clients, 3)
        self.assertEqual(config.interim, 60)
        self.assertEqual(config.nas_port, '7')
        self.assertEqual(config.timeout, 2.5)
        self.assertEqual(config.randomize, False)
        self.assertEqual(config.stop_threshold, 50)
        self.assertEqual(config.unique_mac, True)
        self.assertEqual(config.spread, False)
        self.assertEqual(config.start_before_stop, True)
        self.assertEqual(config.seed, 9)


class MainTests(unittest.TestCase):

    def testThresholdAboveHundredIsFatal(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            status = cli.main(['--threshold', '101'])
        self.assertEqual(status, 1)
        self.assertIn('threshold', stderr.getvalue())


class LogDirectoryTestCase(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.mkdtemp()
        self.log_file = os.path.join(self.directory, 'logger.log')
        self.stop_log = os.path.join(self.directory, 'logs.txt')

    def tearDown(self):
        for name in ('radsim', 'radsim.stops'):
            logger = logging.getLogger(name)
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            logger.propagate = True
            logger.setLevel(logging.NOTSET)
        for name in os.listdir(self.directory):
            os.remove(os.path.join(self.directory, name))
        os.rmdir(self.directory)


class LoggingTests(LogDirectoryTestCase):

    def testSetupLogging(self):
        with open(self.stop_log, 'w') as fd:
            fd.write('previous run\n')
        with open(self.log_file, 'w') as fd:
            fd.write('previous run\n')

        logger, stop_logger = cli.setup_logging(self.log_file, self.stop_log)
        logger.debug('Start 02:00:00:00:00:01')
        stop_logger.info('Stop for 02:00:00:00:00:01')
        for handler in logger.handlers + stop_logger.handlers:
            handler.flush()

        with open(self.log_file) as fd:
            content = fd.read()
        self.assertNotIn('previous run', content)
        self.assertTrue(content.startswith('Radius test '))
        self.assertIn('Start 02:00:00:00:00:01', content)

        with open(self.stop_log) as fd:
            lines = fd.read().splitlines()
        self.assertEqual(lines[0], 'previous run')
        self.assertTrue(lines[1].endswith('Stop for 02:00:00:00:00:01'))


class SignalTests(unittest.IsolatedAsyncioTestCase):

    async def testTerminateStopsEverySession(self):
        config = Config(nb_clients=2, interim=1, timeout=1, spread=False,
                        randomize=False).validate()
        fleet = SignalledFleet(config)
        answered = await asyncio.wait_for(cli.run(fleet), 5)

        self.assertEqual(answered, 2)
        for session in fleet.sessions:
            requests = [request for request in fleet.transport.requests
                        if request['Calling-Station-Id'] ==
                        session.calling_station_id]
            self.assertEqual(requests[-1]['Acct-Status-Type'], 'Stop')
            self.assertEqual(requests[-1]['Acct-Session-Id'],
                             session.acct_session_id)

        loop = asyncio.get_running_loop()
        self.assertFalse(loop.remove_signal_handler(signal.SIGTERM))
        self.assertFalse(loop.remove_signal_handler(signal.SIGINT))


class MainRunTests(LogDirectoryTestCase):

    def testTerminatedRunExitsCleanly(self):
        with mock.patch('radsim.cli.Fleet', SignalledFleet):
            status = cli.main(['--number', '2', '--interim', '1',
                               '--no-spread', '--no-random',
                               '--log-file', self.log_file,
                               '--stop-log', self.stop_log])
        self.assertEqual(status, 0)

        with open(self.stop_log) as fd:
            lines = fd.read().splitlines()
        self.assertEqual(len(lines), 2)
        for line in lines:
            self.assertIn('Stop for ', line)
