"""RabbitMQ transport.

A :class:`Link` owns exactly one pika connection, one channel on it and
the thread that consumes from that channel. pika connections are not
thread safe; any operation requested from another thread is handed to the
consumer thread with ``add_callback_threadsafe``, which runs callbacks in
the order they were added.
"""

from __future__ import annotations

import collections
import functools
import logging
import threading
from typing import Callable, Optional, Union

import pika
import pika.exceptions

from .. import config
from .. import errors
from ..protocol.envelope import Envelope


logger = logging.getLogger(__name__)


Delivery = collections.namedtuple("Delivery", ("tag", "properties", "body"))
Delivery.__doc__ = "One message delivered by the broker: tag, AMQP properties, body."


def connect(connection_or_uri: Union[str, object, None] = None):
    """Return ``(connection, owned)``.

    A string is treated as an AMQP URI and a new blocking connection is
    opened (owned=True). Anything else is assumed to be an open pika
    connection and is used as-is (owned=False). With no argument the
    HWORKER_AMQP_URI environment variable is used.
    """

    if connection_or_uri is None:
        connection_or_uri = config.uri()

    if connection_or_uri is None:
        raise errors.InvalidOption("connection", "required")

    if isinstance(connection_or_uri, str):
        connection = pika.BlockingConnection(config.parameters(connection_or_uri))
        return connection, True

    return connection_or_uri, False


class Link:
    """Exclusive handle on a connection, its channel and consumer thread."""

    join_timeout = 10

    def __init__(self, connection, confirm: bool = False, owned: bool = False):
        self.connection = connection
        self.owned = owned
        self.channel = connection.channel()

        if confirm:
            self.channel.confirm_delivery()

        self._thread: Optional[threading.Thread] = None

    @classmethod
    def open(cls, connection_or_uri=None, confirm: bool = False) -> "Link":
        connection, owned = connect(connection_or_uri)
        return cls(connection, confirm=confirm, owned=owned)

    @property
    def is_open(self) -> bool:
        return bool(self.channel is not None and self.channel.is_open)

    # --- consuming ---

    def qos(self, prefetch: int) -> None:
        self.channel.basic_qos(prefetch_count=prefetch)

    def consume(self, queue: str, handler: Callable[[Delivery], None],
                auto_ack: bool = False, exclusive: bool = False) -> None:
        """Register *handler* for deliveries from *queue*.

        The handler is called on the consumer thread with a
        :class:`Delivery`. Exceptions raised by the handler are logged so
        that one bad delivery does not stop the consumer.
        """

        def on_message(_channel, method, properties, body):
            delivery = Delivery(method.delivery_tag, properties, body)
            try:
                handler(delivery)
            except Exception:
                logger.exception("unhandled error processing delivery %s from %s", method.delivery_tag, queue)

        self.channel.basic_consume(
            queue=queue,
            on_message_callback=on_message,
            auto_ack=auto_ack,
            exclusive=exclusive,
        )

    def start(self) -> None:
        """Start the consumer thread."""

        if self._thread is not None and self._thread.is_alive():
            return

        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            self.channel.start_consuming()
        except pika.exceptions.AMQPError:
            logger.exception("consumer stopped by broker error")

    # --- channel operations ---

    def call(self, method: Callable, *args, **kwargs) -> None:
        """Invoke a channel *method* on the consumer thread.

        Runs immediately when called from the consumer thread itself, or
        before the consumer thread has been started.
        """

        thread = self._thread

        if thread is None or thread is threading.current_thread():
            method(*args, **kwargs)
            return

        if not thread.is_alive():
            raise errors.NotConnected("consumer thread is not running")

        callback = functools.partial(self._guarded, method, args, kwargs)
        self.connection.add_callback_threadsafe(callback)

    @staticmethod
    def _guarded(method, args, kwargs) -> None:
        try:
            method(*args, **kwargs)
        except pika.exceptions.AMQPError:
            logger.exception("broker rejected %s", getattr(method, "__name__", method))

    def publish(self, exchange: str, routing_key: str, envelope: Envelope) -> None:
        properties = pika.BasicProperties(**envelope.properties())

        self.call(
            self.channel.basic_publish,
            exchange=exchange,
            routing_key=routing_key,
            body=envelope.body,
            properties=properties,
            mandatory=envelope.mandatory,
        )

    def ack(self, tag) -> None:
        self.call(self.channel.basic_ack, delivery_tag=tag, multiple=False)

    def nack(self, tag) -> None:
        """Reject a single delivery without requeueing it."""

        self.call(self.channel.basic_nack, delivery_tag=tag, multiple=False, requeue=False)

    def release(self, tag) -> None:
        """Hand a delivery back to the broker for another consumer."""

        self.call(self.channel.basic_nack, delivery_tag=tag, multiple=False, requeue=True)

    # --- teardown ---

    def close(self) -> None:
        """Stop consuming, then close the channel, and the connection if
        this link opened it.
        """

        thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            if thread.is_alive():
                self.connection.add_callback_threadsafe(self.channel.stop_consuming)
                thread.join(self.join_timeout)

        self._thread = None

        if self.channel.is_open:
            self.channel.close()

        if self.owned and self.connection.is_open:
            self.connection.close()
