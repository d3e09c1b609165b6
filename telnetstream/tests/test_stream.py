"""Test SocketByteStream and the handler over a real socket."""
# std imports
import socket
import threading
import time

# 3rd party
import pytest

# local
from telnetstream import ByteStreamHandler
from telnetstream.stream import NO_BYTE, ByteStream, SocketByteStream
from telnetstream.telopt import DO, IAC, IS, SB, SE, SEND, SGA, TTYPE, WILL
from telnetstream.tests.accessories import bind_host  # noqa: F401


def wait_available(stream, count, timeout=2.0):
    """Poll ``stream`` until ``count`` bytes are available."""
    deadline = time.monotonic() + timeout
    while stream.available() < count and time.monotonic() < deadline:
        time.sleep(0.001)
    return stream.available()


def recv_exactly(sock, count, timeout=2.0):
    sock.settimeout(timeout)
    data = b''
    while len(data) < count:
        chunk = sock.recv(count - len(data))
        if not chunk:
            break
        data += chunk
    return data


@pytest.fixture
def socket_pair():
    """Yield (SocketByteStream, peer socket)."""
    local, peer = socket.socketpair()
    stream = SocketByteStream(local, read_timeout=0.2)
    yield stream, peer
    stream.dispose()
    peer.close()


def test_is_byte_stream(socket_pair):
    stream, _ = socket_pair
    assert isinstance(stream, ByteStream)


def test_abstract_contract():
    """ByteStream cannot be used without implementing its methods."""
    with pytest.raises(TypeError):
        ByteStream()


def test_nothing_available(socket_pair):
    """Nothing received reads as NO_BYTE once the wait for a byte expires."""
    stream, _ = socket_pair
    assert stream.available() == 0
    assert stream.read_byte() == NO_BYTE


def test_read_bytes(socket_pair):
    # given,
    stream, peer = socket_pair
    peer.sendall(b'ab')

    # exercise & verify,
    assert wait_available(stream, 2) == 2
    assert stream.read_byte() == ord('a')
    assert stream.available() == 1
    assert stream.read_byte() == ord('b')
    assert stream.read_byte() == NO_BYTE


def test_read_byte_waits_for_byte_in_flight(socket_pair):
    """A byte arriving within read_timeout is returned, not NO_BYTE."""
    # given,
    stream, peer = socket_pair
    timer = threading.Timer(0.02, peer.sendall, args=(b'!',))

    # exercise,
    timer.start()
    try:
        result = stream.read_byte()
    finally:
        timer.join()

    # verify,
    assert result == ord('!')


def test_read_byte_wait_is_bounded():
    local, peer = socket.socketpair()
    stream = SocketByteStream(local, read_timeout=0.05)
    try:
        stime = time.monotonic()
        assert stream.read_byte() == NO_BYTE
        elapsed = time.monotonic() - stime
        assert 0.04 <= elapsed < 0.5
        assert stream.available() == 0
    finally:
        stream.dispose()
        peer.close()


def test_write_byte(socket_pair):
    stream, peer = socket_pair
    for byte in b'hi':
        stream.write_byte(byte)
    assert recv_exactly(peer, 2) == b'hi'


def test_write_byte_out_of_range(socket_pair):
    stream, _ = socket_pair
    with pytest.raises(ValueError):
        stream.write_byte(256)


def test_eof(socket_pair):
    """The remote end closing is not an error, only nothing to read."""
    stream, peer = socket_pair
    peer.sendall(b'z')
    peer.close()
    assert wait_available(stream, 1) == 1
    assert stream.read_byte() == ord('z')
    assert stream.available() == 0
    assert stream.read_byte() == NO_BYTE
    assert stream.at_eof
    assert 'eof' in repr(stream)


def test_dispose(socket_pair):
    stream, _ = socket_pair
    stream.dispose()
    stream.dispose()
    assert 'disposed' in repr(stream)
    assert stream.available() == 0
    with pytest.raises(ValueError):
        stream.write_byte(0)


def test_bad_arguments():
    local, peer = socket.socketpair()
    try:
        with pytest.raises(ValueError):
            SocketByteStream(local, bufsize=0)
        with pytest.raises(ValueError):
            SocketByteStream(local, read_timeout=-1)
    finally:
        local.close()
        peer.close()


def test_connect(bind_host):
    """SocketByteStream.connect opens a TCP connection."""
    # given,
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind((bind_host, 0))
    server.listen(1)
    port = server.getsockname()[1]

    # exercise,
    stream = SocketByteStream.connect(bind_host, port, timeout=2.0)
    client, _ = server.accept()
    try:
        client.sendall(b'!')

        # verify,
        assert wait_available(stream, 1) == 1
        assert stream.read_byte() == ord('!')
    finally:
        stream.dispose()
        client.close()
        server.close()


def test_handler_over_socket(socket_pair):
    """The handler negotiates TTYPE with a peer and reads its prompt."""
    # given,
    stream, peer = socket_pair
    handler = ByteStreamHandler(stream)
    peer.sendall(bytes([IAC, DO, TTYPE, IAC, SB, TTYPE, SEND, IAC, SE]) +
                 b'login: ')

    # exercise,
    result = handler.read(timeout=1.0)

    # verify,
    assert result == 'login: '
    expected = (bytes([IAC, WILL, TTYPE, IAC, SB, TTYPE, IS]) + b'VT100' +
                bytes([IAC, SE]))
    assert recv_exactly(peer, len(expected)) == expected


def send_split(peer, first, second, delay=0.02):
    """Send ``first`` now, and ``second`` after ``delay`` seconds."""
    peer.sendall(first)
    timer = threading.Timer(delay, peer.sendall, args=(second,))
    timer.start()
    return timer


def test_command_split_across_segments(socket_pair):
    """IAC DO SGA split after IAC is negotiated, never read as text."""
    # given,
    stream, peer = socket_pair
    handler = ByteStreamHandler(stream)
    timer = send_split(peer, b'login' + bytes([IAC]),
                       bytes([DO, SGA]) + b': ')

    # exercise,
    try:
        result = handler.read(timeout=1.0)
    finally:
        timer.join()

    # verify,
    assert result == 'login: '
    expected = bytes([IAC, WILL, SGA])
    assert recv_exactly(peer, len(expected)) == expected


def test_subnegotiation_split_across_segments(socket_pair):
    """IAC SB TTYPE split before SEND is answered with the terminal type."""
    # given,
    stream, peer = socket_pair
    handler = ByteStreamHandler(stream)
    timer = send_split(peer, bytes([IAC, SB, TTYPE]),
                       bytes([SEND, IAC, SE]) + b'ok')

    # exercise,
    try:
        result = handler.read(timeout=1.0)
    finally:
        timer.join()

    # verify,
    assert result == 'ok'
    expected = (bytes([IAC, SB, TTYPE, IS]) + b'VT100' + bytes([IAC, SE]))
    assert recv_exactly(peer, len(expected)) == expected
