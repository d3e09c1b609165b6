"""
Response timeout policy.

A read cycle is bounded by two deadlines:

- the *initial* deadline, ``timeout`` seconds after the read begins, is the
  longest we wait for the first byte of a response.
- the *rolling* deadline, ``timeout / 100`` seconds after the most recent byte
  was parsed, is the quiet period after which a response that has begun is
  considered complete.

The functions of this module are pure: each accepts the current time as
argument ``now``, sampled from :func:`time.monotonic` when unset.
"""
# std imports
import datetime
import time

__all__ = (
    "ROLLING_DIVISOR",
    "as_seconds",
    "is_response_pending",
    "is_waiting_for_initial_response",
    "is_waiting_for_incremental_response",
    "is_rolling_timeout_expired",
    "is_initial_response_received",
    "is_response_anticipated",
    "extend_rolling_timeout",
    "ResponseWindow",
)

#: The rolling deadline is this fraction of the nominal timeout.
ROLLING_DIVISOR = 100


def _now(now):
    return time.monotonic() if now is None else now


def as_seconds(timeout):
    """
    Return ``timeout`` as float seconds.

    :param timeout: seconds as int or float, or :class:`datetime.timedelta`.
    :raises ValueError: timeout is negative.
    """
    if isinstance(timeout, datetime.timedelta):
        timeout = timeout.total_seconds()
    timeout = float(timeout)
    if timeout < 0:
        raise ValueError('timeout must be non-negative, got {0!r}'
                         .format(timeout))
    return timeout


def is_response_pending(available):
    """Whether the transport reports any bytes available to read."""
    return available > 0


def is_waiting_for_initial_response(end_initial, initial_received, now=None):
    """Whether no response is yet received and the initial deadline is open."""
    return not initial_received and _now(now) < end_initial


def is_waiting_for_incremental_response(rolling, now=None):
    """
    Whether the rolling deadline is still open.

    Callers that poll this check should suspend briefly *after* sampling
    ``now`` and before acting on the result, see
    :meth:`telnetstream.suspend.BlockingSuspension.run`.
    """
    return _now(now) < rolling


def is_rolling_timeout_expired(rolling, now=None):
    """Whether the rolling deadline has passed."""
    return _now(now) >= rolling


def is_initial_response_received(buf):
    """Whether any output has been accumulated in buffer ``buf``."""
    return len(buf) > 0


def is_response_anticipated(available, initial_received, end_initial,
                            rolling, now=None):
    """Whether a caller should keep waiting for more of a response."""
    now = _now(now)
    return (is_response_pending(available) or
            is_waiting_for_initial_response(end_initial, initial_received,
                                            now) or
            is_waiting_for_incremental_response(rolling, now))


def extend_rolling_timeout(timeout, now=None):
    """Return a rolling deadline, one hundredth of ``timeout`` from ``now``."""
    return _now(now) + as_seconds(timeout) / ROLLING_DIVISOR


class ResponseWindow:
    """
    Deadlines of a single read cycle.

    :param timeout: nominal timeout in seconds, or :class:`datetime.timedelta`.
    :param now: start time of the read cycle, :func:`time.monotonic` when unset.
    """

    def __init__(self, timeout, now=None):
        now = _now(now)
        self.timeout = as_seconds(timeout)
        #: Absolute deadline for the first byte of a response.
        self.end_initial = now + self.timeout
        #: Deadline re-armed each time a byte is parsed.
        self.rolling = extend_rolling_timeout(self.timeout, now)

    def __repr__(self):
        return '<{0} timeout={1} end_initial={2:.3f} rolling={3:.3f}>'.format(
            type(self).__name__, self.timeout, self.end_initial, self.rolling)

    def extend(self, now=None):
        """Re-arm the rolling deadline from ``now``."""
        self.rolling = extend_rolling_timeout(self.timeout, now)
        return self.rolling

    def waiting_for_initial(self, initial_received, now=None):
        return is_waiting_for_initial_response(
            self.end_initial, initial_received, now)

    def waiting_for_incremental(self, now=None):
        return is_waiting_for_incremental_response(self.rolling, now)

    def anticipates(self, available, initial_received, now=None):
        """Whether a caller should keep waiting for more of a response."""
        return is_response_anticipated(available, initial_received,
                                       self.end_initial, self.rolling, now)

    def rolling_expired(self, now=None):
        return is_rolling_timeout_expired(self.rolling, now)
