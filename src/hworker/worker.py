""" The worker side of hworker: consume work envelopes for a task name, run
    the registered work function once per delivery, and report progress and
    the final outcome back to whichever requester submitted the work.
"""

import concurrent.futures
import logging
import uuid

from . import config
from . import errors
from . import json
from .outcome import Outcome
from .protocol import codec
from .protocol import envelope
from .protocol import fields
from .protocol.topology import Topology
from .transport.rabbitmq import Link


logger = logging.getLogger(__name__)


class Logger:
    """ The logger handed to a work function. Each call publishes one
        ``log:*`` update correlated to the delivery being processed; the
        positional arguments travel as a list. Publishing is queued on the
        connection thread, the caller never waits for the broker.
    """

    def __init__(self, worker, delivery):
        self.worker = worker
        self.delivery = delivery


    def info(self, *args):
        self._emit(fields.LOG_INFO, args)

    log = info


    def warn(self, *args):
        self._emit(fields.LOG_WARNING, args)

    warning = warn


    def error(self, *args):
        self._emit(fields.LOG_ERROR, args)


    def _emit(self, kind, args):

        logger.debug('%s from delivery %s: %r', kind, self.delivery.tag, args)

        try:
            self.worker.publish_update(self.delivery, list(args), kind)
        except TypeError:
            self.worker.publish_update(self.delivery, _printable(args), kind)
        except errors.InvalidOption:
            logger.warning('delivery %s has no reply_to, %s update dropped', self.delivery.tag, kind)


# end of class Logger



class Worker:
    """ A :class:`Worker` competes with every other worker of the same task
        *name* for deliveries from the shared work queue. The broker hands
        each work envelope to exactly one of them.

        The work function is either the *work* argument or a ``work`` method
        defined by a subclass; it is called as ``work(payload, logger)`` and
        may return a value, an awaitable, or a future, or raise. At most
        *prefetch* work functions run concurrently on one worker.

        Every delivery is acknowledged or rejected exactly once. Successful
        work is acknowledged after the ``result:success`` update has been
        published; any failure publishes ``result:error`` and then rejects
        the delivery without requeueing it.
    """

    name = None
    work = None
    prefetch = None

    def __init__(self, name=None, work=None, app_id=None, prefetch=None):

        name = name or self.name

        if not name:
            raise errors.InvalidOption('name', 'required')

        if work is not None:
            self.work = work

        if not callable(self.work):
            raise errors.InvalidOption('work', 'required')

        if prefetch is None:
            prefetch = self.prefetch

        if prefetch is None:
            prefetch = config.prefetch()

        if isinstance(prefetch, bool) or not isinstance(prefetch, int) or prefetch < 1:
            raise errors.InvalidOption('prefetch', 'invalid', 'prefetch must be a positive integer, got %r' % (prefetch,))

        self.name = name
        self.prefetch = prefetch
        self.app_id = app_id or str(uuid.uuid4())
        self.topology = Topology(name, fields.WORKER)

        self.link = None
        self.workers = None
        self.closing = False


    def __enter__(self):
        return self


    def __exit__(self, *exc):
        self.close()


    def connect(self, connection_or_uri=None):
        """ Connect to the broker, declare the work topology, and begin
            consuming. *connection_or_uri* is an AMQP URI or an open pika
            connection; if omitted, HWORKER_AMQP_URI is used. Returns self.
        """

        link = Link.open(connection_or_uri)

        try:
            self.topology.declare(link.channel)
            link.qos(self.prefetch)
        except Exception:
            link.close()
            raise

        self.workers = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.prefetch,
            thread_name_prefix='hworker-' + self.name)

        self.link = link
        self.closing = False

        # Not exclusive: the broker load balances across every worker
        # consuming from this queue.

        link.consume(self.topology.work_queue, self.handle_message, auto_ack=False, exclusive=False)
        link.start()

        logger.info('worker %s consuming %s with prefetch %d', self.app_id, self.topology.work_queue, self.prefetch)
        return self


    def close(self):
        """ Let in-flight work finish, then stop consuming and disconnect.
            Deliveries that arrive while the work drains are handed back to
            the broker.
        """

        self.closing = True
        workers = self.workers

        if workers is not None:
            workers.shutdown(wait=True)

        self.workers = None

        link = self.link
        self.link = None

        if link is not None:
            link.close()


    def handle_message(self, delivery):
        """ Validate an incoming delivery and schedule the work function.
            Returns the :class:`concurrent.futures.Future` for the scheduled
            execution, or None if the delivery was ignored or rejected.
        """

        if delivery is None:
            # Consumer cancellation, not a message.
            return None

        workers = self.workers

        if self.link is None or workers is None:
            raise errors.NotConnected('worker %r is not connected' % (self.name,))

        if self.closing:
            self.release(delivery)
            return None

        work = envelope.Envelope.from_delivery(delivery.properties, delivery.body)

        if work.content_type != fields.JSON:
            self.respond_error(delivery, errors.UnsupportedContentType(str(work.content_type)))
            return None

        try:
            payload = work.value()
        except errors.MalformedMessage as error:
            self.respond_error(delivery, error)
            return None

        logger.debug('delivery %s accepted, message id %s', delivery.tag, work.message_id)

        try:
            future = workers.submit(self.execute, delivery, payload)
        except RuntimeError:
            # The executor shut down since the closing check above.
            self.release(delivery)
            return None

        future.add_done_callback(self._executed)
        return future


    def execute(self, delivery, payload):
        """ Run the work function for one delivery and respond with its
            outcome, which is also returned.
        """

        updates = Logger(self, delivery)

        try:
            outcome = Outcome.capture(self.work, payload, updates)
        except BaseException as error:
            self.respond_error(delivery, error)
            raise

        if outcome.ok:
            self.respond_success(delivery, outcome.value)
        else:
            self.handle_error(delivery, outcome.error)

        return outcome


    def handle_error(self, delivery, error):
        """ Invoked with the fault raised by the work function. The default
            publishes the fault and rejects the delivery; subclasses may
            override this, but must still respond to the delivery.
        """

        self.respond_error(delivery, error)


    def respond_success(self, delivery, result):
        """ Publish *result* as ``result:success``, then acknowledge.
        """

        try:
            self.publish_update(delivery, result, fields.RESULT_SUCCESS)
        except TypeError as error:
            self.handle_error(delivery, error)
            return
        except errors.InvalidOption:
            logger.warning('delivery %s has no reply_to, result dropped', delivery.tag)

        self.link.ack(delivery.tag)


    def respond_error(self, delivery, error):
        """ Publish the description of *error* as ``result:error``, then
            reject the delivery without requeueing it.
        """

        description = _description(error)

        try:
            self.publish_update(delivery, description, fields.RESULT_ERROR)
        except errors.InvalidOption:
            logger.warning('delivery %s has no reply_to, cannot report %s', delivery.tag, description.get('name'))
        finally:
            self.link.nack(delivery.tag)


    def release(self, delivery):

        logger.debug('worker %s closing, returning delivery %s to the broker', self.app_id, delivery.tag)
        self.link.release(delivery.tag)


    def publish_update(self, delivery, data, kind):
        """ Publish *data* as an update of the given *kind*, routed to the
            reply queue named by the delivery and correlated to its message
            id. Raises InvalidOption if the delivery carries no reply_to,
            and TypeError if *data* cannot be encoded.
        """

        properties = getattr(delivery, 'properties', None)
        reply_to = getattr(properties, 'reply_to', None)

        if not reply_to:
            raise errors.InvalidOption('delivery', 'malformed')

        correlation_id = getattr(properties, 'message_id', None)
        update = envelope.update(data, kind, correlation_id, self.app_id)

        self.link.publish(self.topology.exchange, reply_to, update)


    def _executed(self, future):

        if future.cancelled():
            return

        error = future.exception()

        if error is not None:
            logger.error('work execution failed outside the work function', exc_info=error)


# end of class Worker



def _description(error):
    """ Wire description of *error*, falling back to its class name and text
        if its own description cannot be encoded.
    """

    description = errors.describe(error)

    try:
        json.dumps(description)
    except TypeError:
        description = {'name': type(error).__name__, 'message': str(error)}

    return description


def _printable(args):

    printable = list()

    for arg in args:
        try:
            codec.encode([arg])
        except TypeError:
            arg = str(arg)
        printable.append(arg)

    return printable


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
