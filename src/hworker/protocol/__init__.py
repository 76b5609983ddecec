"""
hworker Protocol Layer
======================

Message vocabulary, body codec, envelope model and topology naming shared
by requesters and workers. Nothing in this package talks to the broker
directly; channels are handed in by the engines that own them.

    fields.py      Canonical kinds, content types and naming suffixes
    codec.py       Value <-> (bytes, content type)
    envelope.py    Work and update envelopes <-> AMQP properties
    topology.py    Task name -> exchange, work queue, reply queue
"""

from . import fields
from . import codec
from . import envelope
from . import topology

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
