"""Broker topology derived from a task name.

Requesters and workers built with the same task name resolve to the same
exchange and work queue; that is the only thing tying the two sides
together.
"""

from __future__ import annotations

import logging
from typing import Optional

from .. import errors
from . import fields


logger = logging.getLogger(__name__)


class Topology:
    """Exchange, work queue and (for requesters) reply queue names.

    Update envelopes are routed through the named exchange, using the reply
    queue name as the routing key. Requesters bind their reply queue to the
    exchange under its own name for that reason; a worker that published
    through the default exchange instead would never reach them.
    """

    def __init__(self, name: str, role: str = fields.WORKER, app_id: Optional[str] = None):

        if not name:
            raise errors.InvalidOption("name", "required")

        if role not in (fields.WORKER, fields.REQUESTER):
            raise errors.InvalidOption("role", "invalid", "unknown role: %r" % (role,))

        if role == fields.REQUESTER and not app_id:
            raise errors.InvalidOption("app_id", "required")

        self.name = name
        self.role = role
        self.app_id = app_id

        self.exchange = name + fields.EXCHANGE_SUFFIX
        self.work_queue = name

        if role == fields.REQUESTER:
            self.reply_queue = name + fields.RESULTS_INFIX + app_id
        else:
            self.reply_queue = None

    def __repr__(self) -> str:
        return "<Topology %s exchange=%s work=%s reply=%s>" % (
            self.role, self.exchange, self.work_queue, self.reply_queue)

    def declare(self, channel) -> None:
        """Declare and bind everything this role needs on *channel*.

        Every step is idempotent on the broker, so any number of instances
        may run this concurrently.
        """

        if channel is None:
            raise errors.NotConnected("cannot declare topology for %r without a channel" % (self.name,))

        channel.queue_declare(queue=self.work_queue, durable=True)
        channel.exchange_declare(exchange=self.exchange, exchange_type="direct", durable=True)
        channel.queue_bind(queue=self.work_queue, exchange=self.exchange, routing_key=self.work_queue)

        if self.reply_queue is not None:
            channel.queue_declare(queue=self.reply_queue, durable=False, exclusive=True, auto_delete=True)
            channel.queue_bind(queue=self.reply_queue, exchange=self.exchange, routing_key=self.reply_queue)

        logger.debug("declared %r", self)


def resolve(name: str, role: str = fields.WORKER, app_id: Optional[str] = None) -> Topology:
    return Topology(name, role, app_id)
