"""Transport layer implementations."""

from . import rabbitmq
from .rabbitmq import Delivery, Link, connect
