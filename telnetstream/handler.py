"""Module provides :class:`ByteStreamHandler`, the Telnet protocol engine."""
# std imports
import logging
import os
import time

# local imports
from .accessories import name_unicode
from .notify import LoggingNotifier
from .stream import NO_BYTE
from .suspend import BlockingSuspension
from .telopt import (DO, DONT, IAC, IP, IS, SB, SE, SEND, SGA, TSPEED, TTYPE,
                     WILL, WONT, name_command, name_option)
from .timeout import (ResponseWindow, is_initial_response_received,
                      is_response_pending)

__all__ = ('ByteStreamHandler', )

#: Control characters given special treatment in the data stream.
(BEL, BS, VT, FF) = (7, 8, 11, 12)

_STREAM_METHODS = ('available', 'read_byte', 'write_byte', 'dispose')


class ByteStreamHandler:
    """
    Telnet IAC interpreter and response reader over a :class:`ByteStream`.

    The handler separates Telnet commands from text, answers option
    negotiation, and decides when a response is complete.  It takes exclusive
    ownership of ``stream``: disposing the handler disposes the stream.

    Only SGA and TTYPE are agreed to; all other options are refused.  TTYPE
    and TSPEED values are sent when requested by sub-negotiation.

    :param stream: transport implementing ``available()``, ``read_byte()``,
        ``write_byte(byte)`` and ``dispose()``, such as
        :class:`~telnetstream.stream.SocketByteStream`.
    :param str terminal_type: value answered to IAC SB TTYPE SEND.
    :param str terminal_speed: value answered to IAC SB TSPEED SEND, as
        ``'rx,tx'``.
    :param int max_subnegotiation: limit of sub-negotiation payload bytes
        scanned before the negotiation is abandoned.
    :param suspension: a :class:`~telnetstream.suspend.Suspension`.  When
        cooperative, :meth:`read` returns a coroutine.
    :param notifier: a :class:`~telnetstream.notify.Notifier` receiving bell
        and interrupt events.
    :param cancel: object with method ``is_set()``, such as
        :class:`threading.Event` or :class:`asyncio.Event`.  A read in
        progress returns early once it is set.
    :param logging.Logger log: target logger, if None is given, one is
        created using the namespace ``'telnetstream.handler'``.
    """

    #: Options answered in agreement, DO with WILL and WILL with DO.
    agreeable_options = frozenset((SGA, TTYPE))

    #: Default value answered to IAC SB TTYPE SEND.
    default_terminal_type = 'VT100'

    #: Default value answered to IAC SB TSPEED SEND.
    default_terminal_speed = '38400,38400'

    #: Default limit of sub-negotiation payload bytes.
    default_max_subnegotiation = 512

    def __init__(self, stream, *, terminal_type=None, terminal_speed=None,
                 max_subnegotiation=None, suspension=None, notifier=None,
                 cancel=None, log=None):
        missing = [name for name in _STREAM_METHODS
                   if not callable(getattr(stream, name, None))]
        if missing:
            raise TypeError('stream {0!r} does not implement: {1}'
                            .format(stream, ', '.join(missing)))
        if max_subnegotiation is not None and max_subnegotiation < 1:
            raise ValueError('max_subnegotiation must be positive, got {0!r}'
                             .format(max_subnegotiation))
        if cancel is not None and not callable(getattr(cancel, 'is_set', None)):
            raise TypeError('cancel {0!r} does not implement is_set()'
                            .format(cancel))

        self.log = log or logging.getLogger(__name__)
        self._stream = stream
        self.terminal_type = terminal_type or self.default_terminal_type
        self.terminal_speed = terminal_speed or self.default_terminal_speed
        self.max_subnegotiation = (max_subnegotiation or
                                   self.default_max_subnegotiation)
        self.suspension = suspension or BlockingSuspension()
        self.notifier = notifier or LoggingNotifier(log=self.log)
        self._cancel = cancel
        self._interrupted = False
        self._closed = False

    def __repr__(self):
        info = [type(self).__name__]
        if self._closed:
            info.append('disposed')
        info.append('stream={0!r}'.format(self._stream))
        info.append('suspension={0!r}'.format(self.suspension))
        if self._interrupted:
            info.append('interrupted')
        return '<{0}>'.format(' '.join(info))

    # Lifecycle

    @property
    def closed(self):
        """Whether :meth:`dispose` has been called."""
        return self._closed

    def dispose(self):
        """Dispose the owned stream; subsequent calls do nothing."""
        if self._closed:
            return
        self._closed = True
        self.log.debug('dispose {0!r}'.format(self._stream))
        self._stream.dispose()

    def close(self):
        """Dispose the owned stream, as :meth:`dispose`."""
        self.dispose()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.dispose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.dispose()

    # Reading responses

    @property
    def interrupted(self):
        """Whether IAC IP was received during the most recent read."""
        return self._interrupted

    def interrupt(self):
        """
        Stop the read in progress at its next check.

        Called on receipt of IAC IP, after notifying :attr:`notifier`.  May
        also be called by the application from within a notifier callback.
        """
        self._interrupted = True
        self.notifier.interrupt()

    def read(self, timeout):
        """
        Read and return the text of a response.

        Bytes are parsed for as long as they arrive.  The read ends once
        ``timeout`` seconds pass without any response, or, after the first
        output is received, once ``timeout / 100`` seconds pass without
        another byte.  It also ends early on IAC IP, or when ``cancel`` is
        set.

        :param timeout: seconds as float, or :class:`datetime.timedelta`.
        :rtype: str, or a coroutine returning str when :attr:`suspension` is
            cooperative.
        :raises ValueError: handler is disposed, or ``timeout`` is negative.
        """
        return self.suspension.run(self._read_steps(timeout))

    def _cancel_requested(self):
        return self._cancel is not None and self._cancel.is_set()

    def _read_steps(self, timeout):
        # Generator driven by self.suspension; yields seconds to idle, and
        # returns the response.
        if self._closed:
            raise ValueError('read from disposed handler')
        window = ResponseWindow(timeout)
        buf = []
        self._interrupted = False
        while True:
            if self.retrieve_and_parse_response(buf):
                window.extend()
            if self._interrupted:
                self.log.debug('read interrupted by IAC IP.')
                break
            if self._cancel_requested():
                self.log.debug('read cancelled.')
                break
            if is_response_pending(self._stream.available()):
                yield 0
                continue
            now = time.monotonic()
            if window.waiting_for_initial(is_initial_response_received(buf),
                                          now):
                yield 0
                continue
            # idle after sampling, compare with the time sampled before.
            yield self.suspension.idle
            if not window.waiting_for_incremental(now):
                break
        if window.rolling_expired():
            self.log.debug('rolling timeout of {0:.3f}s exceeded.'
                           .format(window.timeout / 100))
        return ''.join(buf)

    # IAC interpreter

    def retrieve_and_parse_response(self, buf):
        """
        Parse one byte, or one IAC command sequence, into list ``buf``.

        Telnet commands are interpreted and never appended.  IAC IAC appends
        ``chr(255)``, vertical tab and form feed append :data:`os.linesep`,
        BEL is delegated to :attr:`notifier`, and backspace is discarded.

        :returns: whether the stream reported any bytes available.
        """
        if not is_response_pending(self._stream.available()):
            return False

        byte = self._stream.read_byte()
        if byte == NO_BYTE:
            pass
        elif byte == IAC:
            verb = self._stream.read_byte()
            if verb == NO_BYTE:
                self.log.debug('recv IAC without command byte (ignored).')
            elif verb == IAC:
                # escaped, literal 255
                buf.append(chr(IAC))
            else:
                self.interpret_command(verb)
        elif byte == BEL:
            self.notifier.bell()
        elif byte == BS:
            self.log.debug('discard {0}'.format(name_unicode(chr(byte))))
        elif byte in (VT, FF):
            buf.append(os.linesep)
        else:
            buf.append(chr(byte))
        return True

    def interpret_command(self, verb):
        """
        Handle command ``verb``, the byte following IAC.

        DO and WILL are answered by :meth:`reply_to_command`, SB by
        :meth:`perform_subnegotiation`, and IP by :meth:`interrupt`.  DONT
        and WONT confirm the default state of any option; their option byte
        is consumed without reply, so as not to loop.  Any other command is
        ignored.
        """
        if verb in (DO, WILL):
            self.reply_to_command(verb)
        elif verb in (DONT, WONT):
            opt = self._stream.read_byte()
            self.log.debug('recv IAC {0} {1} (ignored).'.format(
                name_command(verb), name_option(opt)))
        elif verb == SB:
            self.perform_subnegotiation()
        elif verb == IP:
            self.log.debug('recv IAC IP: Interrupt Process.')
            self.interrupt()
        else:
            self.log.debug('recv IAC {0} (ignored).'.format(
                name_command(verb)))

    def reply_to_command(self, verb):
        """
        Answer (IAC, ``verb``, opt), where ``verb`` is DO or WILL.

        Options of :attr:`agreeable_options` are agreed to, DO answered by
        WILL and WILL by DO.  Any other option is refused, DO answered by
        WONT and WILL by DONT.
        """
        opt = self._stream.read_byte()
        if opt == NO_BYTE:
            self.log.debug('recv IAC {0} without option byte (ignored).'
                           .format(name_command(verb)))
            return
        self.log.debug('recv IAC {0} {1}'.format(
            name_command(verb), name_option(opt)))
        if opt in self.agreeable_options:
            reply = WILL if verb == DO else DO
        else:
            reply = WONT if verb == DO else DONT
        self.log.debug('send IAC {0} {1}'.format(
            name_command(reply), name_option(opt)))
        self._send_iac(IAC, reply, opt)

    # Sub-negotiation

    def perform_subnegotiation(self):
        """
        Answer IAC SB opt <payload> IAC SE, following IAC SB.

        A payload of SEND for TTYPE or TSPEED is answered with
        :attr:`terminal_type` or :attr:`terminal_speed`, SEND for any other
        option is not answered.  Any other payload, or a sub-negotiation that
        is incomplete, interrupted or longer than :attr:`max_subnegotiation`
        bytes, is abandoned by sending IAC WONT opt.
        """
        opt = self._stream.read_byte()
        if opt == NO_BYTE:
            self.log.debug('recv IAC SB without option byte (ignored).')
            return

        payload = self._scan_subnegotiation(opt)
        if not payload or payload[0] != SEND:
            self.log.debug('abandon sub-negotiation of {0}: {1!r}'.format(
                name_option(opt), payload))
            self.log.debug('send IAC WONT {0}'.format(name_option(opt)))
            self._send_iac(IAC, WONT, opt)
            return

        if len(payload) > 1:
            self.log.debug('SB {0} SEND: ignoring trailing bytes {1!r}'
                           .format(name_option(opt), bytes(payload[1:])))
        value = {TTYPE: self.terminal_type,
                 TSPEED: self.terminal_speed}.get(opt)
        if value is None:
            self.log.debug('SB {0} SEND not supported (ignored).'
                           .format(name_option(opt)))
            return
        self.send_subnegotiation(opt, value)

    def _scan_subnegotiation(self, opt):
        # Return payload of sub-negotiation up to IAC SE, with IAC IAC
        # unescaped, or None when it cannot be found.
        payload = bytearray()
        while True:
            byte = self._stream.read_byte()
            if byte == NO_BYTE:
                self.log.debug('SB {0}: incomplete, no IAC SE'
                               .format(name_option(opt)))
                return None
            if byte == IAC:
                cmd = self._stream.read_byte()
                if cmd == SE:
                    return payload
                if cmd != IAC:
                    self.log.debug('SB {0}: interrupted by IAC {1}'.format(
                        name_option(opt), name_command(cmd)))
                    return None
            if len(payload) >= self.max_subnegotiation:
                self.log.debug('SB {0}: exceeds {1} bytes'.format(
                    name_option(opt), self.max_subnegotiation))
                return None
            payload.append(byte)

    def send_subnegotiation(self, opt, value):
        """
        Send IAC SB ``opt`` IS ``value`` IAC SE.

        :param int opt: option byte.
        :param str value: ascii string.
        :raises UnicodeEncodeError: ``value`` is not ascii.
        """
        data = value.encode('ascii')
        self.log.debug('send IAC SB {0} IS {1!r} IAC SE'.format(
            name_option(opt), data))
        self._send_iac(IAC, SB, opt, IS, *data, IAC, SE)

    def _send_iac(self, *seq):
        for byte in seq:
            self._stream.write_byte(int(byte))
