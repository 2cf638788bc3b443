# config.py
#
# Run configuration shared by all sessions

__docformat__ = "epytext en"


class ConfigError(ValueError):
    """Invalid run configuration. Fatal at startup."""


class Config:
    """Read-only configuration of a simulation run.

    Every session task reads the same instance, attributes can not be
    changed once it is built.

    :ivar interim: seconds between two accounting updates of a session
    :type interim: integer
    :ivar stop_threshold: percentage of randomized decisions ending the
                          session
    :type stop_threshold: integer
    :ivar timeout: seconds to wait for an answer to one request
    :type timeout: float
    """

    defaults = {
        'host': '127.0.0.1',
        'port': 1813,
        'secret': 'testing123',
        'nb_clients': 500,
        'interim': 360,
        'nas_port': '1500',
        'timeout': 10.0,
        'randomize': True,
        'stop_threshold': 2,
        'unique_mac': False,
        'spread': True,
        'start_before_stop': False,
        'retries': 3,
        'heartbeat': 60,
        'seed': None,
    }

    def __init__(self, **kwargs):
        unknown = set(kwargs) - set(self.defaults)
        if unknown:
            raise ConfigError('Unknown configuration keys: %s'
                              % ', '.join(sorted(unknown)))

        values = dict(self.defaults)
        values.update(kwargs)
        for key, value in values.items():
            object.__setattr__(self, key, value)

    def __setattr__(self, key, value):
        raise AttributeError('Config is read-only')

    def __delattr__(self, key):
        raise AttributeError('Config is read-only')

    @property
    def secret_bytes(self):
        if isinstance(self.secret, bytes):
            return self.secret
        return self.secret.encode('utf-8')

    def validate(self):
        """Check the configuration.

        :raise ConfigError: a value is out of range
        :return: the configuration itself
        :rtype:  Config
        """
        if not 0 <= self.stop_threshold <= 100:
            raise ConfigError('threshold can not be greater than 100 or'
                              ' lower than 0 (got %d)' % self.stop_threshold)
        if self.nb_clients < 1:
            raise ConfigError('number of clients must be at least 1')
        if self.interim < 1:
            raise ConfigError('interim must be at least 1 second')
        if self.timeout <= 0:
            raise ConfigError('timeout must be positive')
        if self.retries < 1:
            raise ConfigError('retries must be at least 1')
        if self.heartbeat <= 0:
            raise ConfigError('heartbeat must be positive')
        if not 0 < self.port < 65536:
            raise ConfigError('invalid server port %d' % self.port)
        try:
            int(self.nas_port)
        except (TypeError, ValueError):
            raise ConfigError('NAS port must be an integer, got %r'
                              % (self.nas_port,))
        return self

    def __repr__(self):
        return 'Config(%s)' % ', '.join(
            '%s=%r' % (key, getattr(self, key))
            for key in self.defaults if key != 'secret')
