""" Normalize the result of calling a work function. Whether the function
    returns a plain value, returns an awaitable or a future, or raises, the
    caller always gets back exactly one :class:`Outcome`.
"""

import asyncio
import concurrent.futures
import inspect


class Outcome:
    """ Either a success carrying *value*, or a failure carrying *error*.
    """

    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error


    def __repr__(self):
        if self.ok:
            return '<Outcome success %r>' % (self.value,)
        else:
            return '<Outcome failure %r>' % (self.error,)


    @property
    def ok(self):
        return self.error is None


    @classmethod
    def success(cls, value):
        return cls(value=value)


    @classmethod
    def failure(cls, error):
        if error is None:
            raise ValueError('a failed Outcome requires an error')
        return cls(error=error)


    @classmethod
    def capture(cls, function, *args, **kwargs):
        """ Call *function* and wait for whatever it produces. Awaitables are
            run to completion in a private event loop, so this must not be
            called from a thread that already runs one.

            Cancellation and other BaseException subclasses raised by the
            function are failures too; only KeyboardInterrupt propagates.
        """

        try:
            result = function(*args, **kwargs)

            if inspect.isawaitable(result):
                result = asyncio.run(_settle(result))
            elif isinstance(result, concurrent.futures.Future):
                result = result.result()

        except KeyboardInterrupt:
            raise
        except BaseException as error:
            return cls.failure(error)

        return cls.success(result)


# end of class Outcome



async def _settle(awaitable):
    return await awaitable


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
