""" Environment-driven defaults. Values are read at call time so that a
    process can adjust its environment before connecting.
"""

import os

import pika

from . import errors


def uri():
    """ Return the default broker URI, or None if HWORKER_AMQP_URI is unset.
    """

    value = os.environ.get('HWORKER_AMQP_URI', '')
    value = value.strip()

    if value == '':
        return None

    return value


def prefetch():
    return _positive('HWORKER_PREFETCH', 1)


def heartbeat():
    return _positive('HWORKER_HEARTBEAT', 600)


def blocked_timeout():
    return _positive('HWORKER_BLOCKED_TIMEOUT', 300)


def parameters(uri):
    """ Build :class:`pika.URLParameters` for *uri*, applying the heartbeat
        and blocked connection timeout unless the URI sets them itself.
    """

    params = pika.URLParameters(uri)

    if 'heartbeat=' not in uri:
        params.heartbeat = heartbeat()

    if 'blocked_connection_timeout=' not in uri:
        params.blocked_connection_timeout = blocked_timeout()

    return params


def _positive(variable, default):

    value = os.environ.get(variable)

    if value is None or value.strip() == '':
        return default

    try:
        value = int(value)
    except ValueError:
        raise errors.InvalidOption(variable, 'invalid', '%s must be an integer, got %r' % (variable, value))

    if value < 1:
        raise errors.InvalidOption(variable, 'invalid', '%s must be positive, got %d' % (variable, value))

    return value


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
