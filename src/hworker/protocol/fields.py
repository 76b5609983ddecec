"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

JSON = "application/json"
TEXT = "text/plain"
ENCODING = "utf8"

# Message kinds, carried in the AMQP 'type' property.
WORK_REQUEST = "work-request"

RESULT_SUCCESS = "result:success"
RESULT_ERROR = "result:error"
LOG_INFO = "log:info"
LOG_WARNING = "log:warning"
LOG_ERROR = "log:error"

RESULTS = (RESULT_SUCCESS, RESULT_ERROR)
LOGS = (LOG_INFO, LOG_WARNING, LOG_ERROR)
UPDATES = RESULTS + LOGS

# Topology naming.
EXCHANGE_SUFFIX = "-exchange"
RESULTS_INFIX = "-results-"

# Roles accepted by the topology resolver.
WORKER = "worker"
REQUESTER = "requester"
