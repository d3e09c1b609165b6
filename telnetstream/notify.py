"""Side effects signalled by the byte parser: audible bell and interrupt."""
# std imports
import logging

__all__ = ('Notifier', 'LoggingNotifier')


class Notifier:
    """
    Receiver of out-of-band events found in the byte stream.

    The default implementation does nothing; derive and override
    :meth:`bell` or :meth:`interrupt` to act on them.
    """

    def bell(self):
        """Handle BEL (``^G``) found in the data stream."""

    def interrupt(self):
        """Handle IAC IP (Interrupt Process) received from the remote end."""


class LoggingNotifier(Notifier):
    r"""
    Notifier logging each event, optionally ringing a terminal bell.

    :param logging.Logger log: target logger, if None is given, one is
        created using the namespace ``'telnetstream.notify'``.
    :param stream: text stream to write ``'\a'`` to on BEL, such as
        :data:`sys.stderr`.  No bell is rung when unset.
    """

    def __init__(self, log=None, stream=None):
        self.log = log or logging.getLogger(__name__)
        self.stream = stream

    def bell(self):
        """Log BEL and ring the bell of :attr:`stream`, if any."""
        self.log.debug('BEL: bell received.')
        if self.stream is not None:
            self.stream.write('\a')
            self.stream.flush()

    def interrupt(self):
        """Log receipt of IAC IP."""
        self.log.debug('IAC IP: Interrupt Process received.')
