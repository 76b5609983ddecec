""" The closed set of failure conditions shared by the requester and the
    worker. Every leaf can describe itself as a JSON-ready dictionary, which
    is what travels on the wire inside a ``result:error`` update.
"""


class HWorkerError(Exception):
    """ Base class for all hworker failures.
    """

    def __init__(self, message=''):
        Exception.__init__(self, message)
        self.message = message


    def describe(self):
        return {'name': type(self).__name__, 'message': self.message}


class InvalidOption(HWorkerError):
    """ A required option is missing or invalid. The *option* attribute
        names the offending option, *kind* says what is wrong with it
        ('required', 'invalid', 'malformed', 'unknown', ...).
    """

    def __init__(self, option, kind, message=None):

        if message is None:
            message = '%s: %s' % (option, kind)

        HWorkerError.__init__(self, message)
        self.option = option
        self.kind = kind


    def describe(self):
        return {
            'name': type(self).__name__,
            'option': self.option,
            'kind': self.kind,
            'message': self.message,
        }


class MalformedMessage(HWorkerError):
    """ The body of a message could not be decoded according to its
        declared content type.
    """


class UnsupportedContentType(HWorkerError):
    """ The declared content type of a message is not one this protocol
        accepts.
    """


class NotConnected(HWorkerError):
    """ An operation requiring an established broker channel was invoked
        before the connection completed.
    """


leaves = (InvalidOption, MalformedMessage, UnsupportedContentType, NotConnected)


def describe(error):
    """ Return the wire description of *error*: the exception's own
        describe() result if it has one, otherwise its class name and text.
    """

    try:
        method = error.describe
    except AttributeError:
        method = None

    if callable(method):
        return method()

    return {'name': type(error).__name__, 'message': str(error)}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
