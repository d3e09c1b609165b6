"""Module provides the byte stream contract and :class:`SocketByteStream`."""
# std imports
import abc
import logging
import select
import socket

__all__ = ('ByteStream', 'SocketByteStream', 'NO_BYTE')

#: Value returned by :meth:`ByteStream.read_byte` when no byte is ready.
NO_BYTE = -1


class ByteStream(abc.ABC):
    """
    Byte-at-a-time transport consumed by the Telnet protocol engine.

    Implementations never block in :meth:`available`, which returns ``0``
    when nothing is ready.  The engine calls :meth:`read_byte` only once a
    byte was reported available, and again for the rest of a command
    sequence; an implementation may wait briefly there for bytes in flight,
    returning :data:`NO_BYTE` at end of stream or when none arrive.
    """

    @abc.abstractmethod
    def available(self):
        """Return the number of bytes that may be read without blocking."""

    @abc.abstractmethod
    def read_byte(self):
        """Return the next byte as int (0-255), or :data:`NO_BYTE`."""

    @abc.abstractmethod
    def write_byte(self, byte):
        """Write a single byte, given as int (0-255)."""

    @abc.abstractmethod
    def dispose(self):
        """Release the underlying resource."""


class SocketByteStream(ByteStream):
    """
    A :class:`ByteStream` over a connected stream socket.

    Received data is staged in an internal buffer.  :meth:`available` refills
    it only when :func:`select.select` reports the socket readable, and never
    blocks.  :meth:`read_byte` on an empty buffer waits up to ``read_timeout``
    seconds for the remainder of a command sequence split across segments.
    Writes block until sent.

    :param socket.socket sock: connected socket, ownership is taken.
    :param int bufsize: maximum bytes received by each refill.
    :param float read_timeout: seconds :meth:`read_byte` waits for a byte.
    """

    def __init__(self, sock, bufsize=2 ** 12, read_timeout=0.5):
        if bufsize <= 0:
            raise ValueError('bufsize must be positive, got {0!r}'
                             .format(bufsize))
        if read_timeout < 0:
            raise ValueError('read_timeout must be non-negative, got {0!r}'
                             .format(read_timeout))
        self.log = logging.getLogger(__name__)
        self._sock = sock
        self._bufsize = bufsize
        self._read_timeout = read_timeout
        self._buffer = bytearray()
        self._eof = False

    @classmethod
    def connect(cls, host, port=23, timeout=None, **kwargs):
        """Open a TCP connection to ``host`` and ``port``, return a stream."""
        sock = socket.create_connection((host, port), timeout=timeout)
        sock.settimeout(None)
        return cls(sock, **kwargs)

    def __repr__(self):
        info = [type(self).__name__]
        if self._sock is None:
            info.append('disposed')
        else:
            info.append('fd={0}'.format(self._sock.fileno()))
        if self._buffer:
            info.append('{0} bytes'.format(len(self._buffer)))
        if self._eof:
            info.append('eof')
        return '<{0}>'.format(' '.join(info))

    @property
    def at_eof(self):
        """Whether the remote end closed and the buffer is exhausted."""
        return self._eof and not self._buffer

    def _fill(self, timeout=0):
        if self._eof or self._sock is None:
            return
        readable, _, _ = select.select([self._sock], [], [], timeout)
        if not readable:
            return
        data = self._sock.recv(self._bufsize)
        if data:
            self._buffer.extend(data)
        else:
            self.log.debug('recv: connection closed by remote end.')
            self._eof = True

    def available(self):
        if not self._buffer:
            self._fill()
        return len(self._buffer)

    def read_byte(self):
        """
        Return the next byte as int (0-255), or :data:`NO_BYTE`.

        An empty buffer is refilled, waiting up to ``read_timeout`` seconds,
        so that the bytes of a command sequence which arrive in separate
        segments are read as one sequence.  :data:`NO_BYTE` is returned at
        end of stream, after dispose, or when the wait expires.
        """
        if not self._buffer:
            self._fill(self._read_timeout)
        if not self._buffer:
            return NO_BYTE
        byte = self._buffer[0]
        del self._buffer[0]
        return byte

    def write_byte(self, byte):
        if self._sock is None:
            raise ValueError('write to disposed stream')
        self._sock.sendall(bytes((byte,)))

    def dispose(self):
        """Close the socket; subsequent calls do nothing."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
            self._buffer.clear()
