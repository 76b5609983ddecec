""" Python implementation of hworker: requesters submit units of work to a
    pool of workers sharing a task name over RabbitMQ, and receive progress
    logs and a single success or error result for each submission.
"""

# Utility components.

from . import json
from . import errors
from . import config

# Submodules used by multiple other components.

from . import protocol
from . import transport
from .outcome import Outcome

# Primary public-facing interfaces.

from .client import Client
from .worker import Worker

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
