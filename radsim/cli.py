# cli.py
#
# Command line entry point

import argparse
import asyncio
import logging
import signal
import sys

from radsim import __version__
from radsim.config import Config, ConfigError
from radsim.fleet import Fleet

USAGE = """
Sends Accounting RADIUS packets for a number of simulated sessions to a
server and prints the results.
"""

LOG_FORMAT = 'Radius test %(asctime)s %(filename)s:%(lineno)d: %(message)s'
CONSOLE_FORMAT = '%(message)s'


def build_parser():
    defaults = Config.defaults
    parser = argparse.ArgumentParser(prog='radsim', description=USAGE)
    parser.add_argument('--host', default=defaults['host'],
                        help='server ip')
    parser.add_argument('--port', type=int, default=defaults['port'],
                        help='server port')
    parser.add_argument('--secret', default=defaults['secret'],
                        help='shared secret')
    parser.add_argument('--number', type=int, default=defaults['nb_clients'],
                        help='number of Calling-Station-Id')
    parser.add_argument('--interim', type=int, default=defaults['interim'],
                        help='number of seconds between interim-updates')
    parser.add_argument('--nasport', default=defaults['nas_port'],
                        help='NAS port')
    parser.add_argument('--timeout', type=float, default=defaults['timeout'],
                        help='seconds for a request to finish')
    parser.add_argument('--retries', type=int, default=defaults['retries'],
                        help='number of times a request is sent')
    parser.add_argument('--random', action=argparse.BooleanOptionalAction,
                        default=defaults['randomize'],
                        help='randomize the accounting traffic')
    parser.add_argument('--threshold', type=int,
                        default=defaults['stop_threshold'],
                        help='percent of chance to send accounting stop on'
                             ' a session')
    parser.add_argument('--unique', action=argparse.BooleanOptionalAction,
                        default=defaults['unique_mac'],
                        help='use the same mac address for all sessions')
    parser.add_argument('--spread', action=argparse.BooleanOptionalAction,
                        default=defaults['spread'],
                        help='spread session starts across the interim')
    parser.add_argument('--startstop', action=argparse.BooleanOptionalAction,
                        default=defaults['start_before_stop'],
                        help='send the start of a new session before the'
                             ' stop of the previous one')
    parser.add_argument('--heartbeat', type=float,
                        default=defaults['heartbeat'],
                        help='seconds between two liveness log lines')
    parser.add_argument('--seed', type=int, default=None,
                        help='seed of the random generators')
    parser.add_argument('--log-file', default='logger.log',
                        help='log file, truncated on start')
    parser.add_argument('--stop-log', default='logs.txt',
                        help='file recording the Stop sent on shutdown')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log every request on the console')
    parser.add_argument('--version', action='version',
                        version='%(prog)s ' + __version__)
    return parser


def config_from_args(args):
    return Config(host=args.host,
                  port=args.port,
                  secret=args.secret,
                  nb_clients=args.number,
                  interim=args.interim,
                  nas_port=args.nasport,
                  timeout=args.timeout,
                  retries=args.retries,
                  randomize=args.random,
                  stop_threshold=args.threshold,
                  unique_mac=args.unique,
                  spread=args.spread,
                  start_before_stop=args.startstop,
                  heartbeat=args.heartbeat,
                  seed=args.seed)


def setup_logging(log_file, stop_log, verbose=False):
    """Build the loggers of a run.

    :return: main logger and the logger of the shutdown Stop records
    :rtype:  tuple of logging.Logger
    """
    logger = logging.getLogger('radsim')
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    file_handler = logging.FileHandler(log_file, mode='w')
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    stop_logger = logging.getLogger('radsim.stops')
    stop_logger.setLevel(logging.INFO)
    stop_logger.propagate = False
    stop_handler = logging.FileHandler(stop_log, mode='a')
    stop_handler.setFormatter(logging.Formatter('%(asctime)s %(message)s'))
    stop_logger.addHandler(stop_handler)
    stop_logger.addHandler(console)

    return logger, stop_logger


async def run(fleet):
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, fleet.request_shutdown)
    try:
        return await fleet.run()
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args).validate()
    except ConfigError as exc:
        print('radsim: %s' % exc, file=sys.stderr)
        return 1

    logger, stop_logger = setup_logging(args.log_file, args.stop_log,
                                        verbose=args.verbose)
    logger.info('Starting: %r', config)

    fleet = Fleet(config, logger=logger, stop_logger=stop_logger)
    asyncio.run(run(fleet))
    logger.info('Terminated')
    logging.shutdown()
    return 0


if __name__ == '__main__':
    sys.exit(main())
