""" A class representation of the two hworker message shapes: the work
    envelope sent by a requester, and the update envelope sent back by a
    worker. Both map onto AMQP basic properties rather than any bespoke
    framing; the body is produced by :mod:`hworker.protocol.codec`.
"""

import time
import uuid

from .. import json
from . import codec
from . import fields


def new_id():
    """ Return a fresh identifier suitable for message and correlation ids.
    """

    return str(uuid.uuid4())


def now():
    """ Current time as integer epoch milliseconds.
    """

    return int(time.time() * 1000)


class Envelope:
    """ The :class:`Envelope` carries a message body along with the metadata
        that travels in the AMQP properties. The *kind* is one of the kinds
        in :mod:`hworker.protocol.fields`; *reply_to* is only present on
        work envelopes, and *correlation_id* only on update envelopes.

        :ivar mandatory: Whether the broker should return the message if it
            cannot be routed to any queue.
    """

    def __init__(self, body, content_type, kind, app_id, message_id=None,
                 correlation_id=None, reply_to=None, timestamp=None, mandatory=False):

        if message_id is None:
            message_id = new_id()

        if timestamp is None:
            timestamp = now()

        self.body = body
        self.content_type = content_type
        self.kind = kind
        self.app_id = app_id
        self.message_id = message_id
        self.correlation_id = correlation_id
        self.reply_to = reply_to
        self.timestamp = timestamp
        self.mandatory = mandatory


    def __repr__(self):
        return '<Envelope %s %s correlation=%s>' % (self.kind, self.message_id, self.correlation_id)


    def properties(self):
        """ Return the AMQP basic properties for this envelope as keyword
            arguments for :class:`pika.BasicProperties`. Properties that do
            not apply to this envelope are omitted.
        """

        properties = dict()
        properties['content_type'] = self.content_type
        properties['content_encoding'] = fields.ENCODING
        properties['delivery_mode'] = 2
        properties['message_id'] = self.message_id
        properties['type'] = self.kind
        properties['app_id'] = self.app_id
        properties['timestamp'] = self.timestamp

        if self.correlation_id is not None:
            properties['correlation_id'] = self.correlation_id

        if self.reply_to is not None:
            properties['reply_to'] = self.reply_to

        return properties


    def value(self):
        """ Decode the body according to the declared content type.
        """

        return codec.decode(self.body, self.content_type)


    @classmethod
    def from_delivery(cls, properties, body):
        """ Build an :class:`Envelope` from the properties and body of a
            delivered message. Missing properties come back as None.
        """

        envelope = cls(
            body=body,
            content_type=getattr(properties, 'content_type', None),
            kind=getattr(properties, 'type', None),
            app_id=getattr(properties, 'app_id', None),
            correlation_id=getattr(properties, 'correlation_id', None),
            reply_to=getattr(properties, 'reply_to', None),
        )

        # The constructor fills in a fresh id and timestamp; a delivered
        # message keeps whatever the sender supplied, even if that is None.

        envelope.message_id = getattr(properties, 'message_id', None)
        envelope.timestamp = getattr(properties, 'timestamp', None)

        return envelope


# end of class Envelope



def work(payload, reply_to, app_id):
    """ Build a work envelope for *payload*. The payload is always sent as
        JSON; values that cannot be encoded raise TypeError.
    """

    body = json.dumps(payload)

    return Envelope(body, fields.JSON, fields.WORK_REQUEST, app_id,
                    reply_to=reply_to, mandatory=True)


def update(data, kind, correlation_id, app_id):
    """ Build an update envelope of the given *kind* for *data*, correlated
        to the work envelope whose message id is *correlation_id*.
    """

    if kind not in fields.UPDATES:
        raise ValueError('invalid update kind: ' + repr(kind))

    body, content_type = codec.encode(data)

    return Envelope(body, content_type, kind, app_id,
                    correlation_id=correlation_id)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
