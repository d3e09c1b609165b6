"""
Suspension strategies for the response read loop.

The read loop of :class:`~telnetstream.handler.ByteStreamHandler` is written
once, as a generator that yields the number of seconds it wishes to idle
between polls of the transport.  A suspension strategy drives that generator
to completion, idling by whichever primitive suits the caller:

- :class:`BlockingSuspension` blocks the calling thread with
  :func:`time.sleep`, :meth:`~BlockingSuspension.run` returns the result.
- :class:`CooperativeSuspension` yields to the event loop with
  :func:`asyncio.sleep`, :meth:`~CooperativeSuspension.run` is a coroutine.
"""
# std imports
import asyncio
import time

__all__ = ('Suspension', 'BlockingSuspension', 'CooperativeSuspension')


class Suspension:
    """Base class of suspension strategies."""

    #: Seconds to idle between polls of the rolling deadline.
    idle = 0.001

    def __init__(self, idle=None):
        if idle is not None:
            if idle < 0:
                raise ValueError('idle must be non-negative, got {0!r}'
                                 .format(idle))
            self.idle = idle

    def __repr__(self):
        return '<{0} idle={1}>'.format(type(self).__name__, self.idle)

    def run(self, steps):
        """Drive generator ``steps`` to completion, return its result."""
        raise NotImplementedError


class BlockingSuspension(Suspension):
    """Idle by blocking the calling thread."""

    def run(self, steps):
        """
        Drive generator ``steps`` to completion, return its result.

        Each value yielded by ``steps`` is a number of seconds to sleep.
        """
        try:
            while True:
                time.sleep(next(steps))
        except StopIteration as stop:
            return stop.value


class CooperativeSuspension(Suspension):
    """Idle by yielding to the running :mod:`asyncio` event loop."""

    async def run(self, steps):
        """
        Drive generator ``steps`` to completion, return its result.

        Each value yielded by ``steps`` is a number of seconds to await
        :func:`asyncio.sleep`.  Cancelling the awaiting task raises
        :class:`asyncio.CancelledError` from the suspension point and closes
        ``steps``.
        """
        try:
            while True:
                delay = next(steps)
                try:
                    await asyncio.sleep(delay)
                except asyncio.CancelledError:
                    steps.close()
                    raise
        except StopIteration as stop:
            return stop.value
