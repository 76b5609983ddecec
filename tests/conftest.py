import os
import pika
import pytest

import fakebroker
from hworker.transport import Delivery


@pytest.fixture
def broker():
    return fakebroker.Broker()


@pytest.fixture
def connect(broker):
    """ Connect a Client or Worker to the fake broker; everything connected
        this way is closed again when the test finishes.
    """

    connected = list()

    def connect(engine):
        engine.connect(broker.connection())
        connected.append(engine)
        return engine

    yield connect

    for engine in reversed(connected):
        engine.close()


@pytest.fixture
def delivery():
    """ Build a Delivery by hand, as though the broker had just handed it
        over. Tags are unique within a test.
    """

    tags = iter(range(1000, 2000))

    def delivery(body, content_type='application/json', reply_to='another-application-id-queue', message_id='request-1'):

        if isinstance(body, str):
            body = body.encode()

        properties = pika.BasicProperties(
            content_type=content_type,
            reply_to=reply_to,
            message_id=message_id,
            type='work-request')

        return Delivery(next(tags), properties, body)

    return delivery


@pytest.fixture
def amqp_uri():
    """ URI of a live broker for integration tests. Tests using this fixture
        are skipped unless HWORKER_TEST_AMQP_URI is set.
    """

    uri = os.environ.get('HWORKER_TEST_AMQP_URI')

    if not uri:
        pytest.skip('HWORKER_TEST_AMQP_URI is not set')

    return uri


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
