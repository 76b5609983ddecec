""" The requester side of hworker: submit work for a task name and receive
    the progress logs and final result for each submission as callbacks,
    keyed by the correlation id that :func:`Client.submit` returned.
"""

import logging
import threading
import uuid

from . import errors
from .protocol import envelope
from .protocol import fields
from .protocol.topology import Topology
from .transport.rabbitmq import Link


logger = logging.getLogger(__name__)


class Client:
    """ A :class:`Client` submits work envelopes for the task *name* and
        listens on a reply queue private to this instance. Callbacks are
        registered per update kind with :func:`on`, and are invoked as
        ``callback(correlation_id, value)`` on the connection thread:

            * ``result:success``: the value returned by the work function
            * ``result:error``: a description dictionary with at least
              'name' and 'message'
            * ``log:info``, ``log:warning``, ``log:error``: the list of
              arguments passed to the worker's logger

        There is no timeout on a submission; a caller that wants one should
        track correlation ids against its own timer.
    """

    name = None

    def __init__(self, name=None, app_id=None):

        name = name or self.name

        if not name:
            raise errors.InvalidOption('name', 'required')

        self.name = name
        self.app_id = app_id or str(uuid.uuid4())
        self.topology = Topology(name, fields.REQUESTER, self.app_id)

        self.link = None

        self._observers = dict()
        self._observers_lock = threading.Lock()

        for kind in fields.UPDATES:
            self._observers[kind] = list()


    def __enter__(self):
        return self


    def __exit__(self, *exc):
        self.close()


    @property
    def reply_to(self):
        return self.topology.reply_queue


    def connect(self, connection_or_uri=None):
        """ Connect to the broker, declare the topology including this
            instance's reply queue, and begin consuming replies.
            *connection_or_uri* is an AMQP URI or an open pika connection;
            if omitted, HWORKER_AMQP_URI is used. Returns self.
        """

        link = Link.open(connection_or_uri, confirm=True)

        try:
            self.topology.declare(link.channel)
            link.consume(self.reply_to, self.handle_update, auto_ack=True, exclusive=True)
        except Exception:
            link.close()
            raise

        link.start()
        self.link = link

        logger.info('client %s submitting to %s, replies on %s', self.app_id, self.topology.work_queue, self.reply_to)
        return self


    def close(self):
        link = self.link
        self.link = None

        if link is not None:
            link.close()


    def submit(self, payload):
        """ Publish *payload* as a work envelope and return its correlation
            id immediately. Raises NotConnected if :func:`connect` has not
            completed, and TypeError if the payload cannot be JSON encoded.
        """

        link = self.link

        if link is None:
            raise errors.NotConnected('client %r must connect before submitting work' % (self.name,))

        if payload is None:
            raise errors.InvalidOption('payload', 'required')

        work = envelope.work(payload, self.reply_to, self.app_id)
        link.publish(self.topology.exchange, self.topology.work_queue, work)

        logger.debug('submitted %s', work.message_id)
        return work.message_id


    def on(self, kind, callback):
        """ Invoke *callback* for every update of the given *kind*.
        """

        if kind not in self._observers:
            raise errors.InvalidOption('kind', 'unknown', 'unknown update kind: %r' % (kind,))

        if not callable(callback):
            raise errors.InvalidOption('callback', 'invalid')

        with self._observers_lock:
            self._observers[kind].append(callback)


    def off(self, kind, callback):
        """ Remove a callback registered with :func:`on`. Removing a callback
            that was never registered is a no-op.
        """

        with self._observers_lock:
            try:
                self._observers[kind].remove(callback)
            except (KeyError, ValueError):
                pass


    def handle_update(self, delivery):
        """ Decode one delivery from the reply queue and hand it to the
            callbacks registered for its kind. Updates that cannot be
            attributed, decoded, or classified are logged and dropped.
        """

        if delivery is None:
            return

        update = envelope.Envelope.from_delivery(delivery.properties, delivery.body)

        if not update.correlation_id:
            logger.warning('dropping %s update without a correlation id', update.kind)
            return

        if update.kind not in fields.UPDATES:
            logger.warning('ignoring update of unknown kind %r for %s', update.kind, update.correlation_id)
            return

        try:
            value = update.value()
        except errors.MalformedMessage as error:
            logger.warning('dropping malformed %s update for %s: %s', update.kind, update.correlation_id, error)
            return

        self.emit(update.kind, update.correlation_id, value)


    def emit(self, kind, correlation_id, value):

        with self._observers_lock:
            observers = tuple(self._observers.get(kind, ()))

        for callback in observers:
            try:
                callback(correlation_id, value)
            except Exception:
                logger.exception('%s callback failed for %s', kind, correlation_id)


# end of class Client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
