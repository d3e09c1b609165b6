"""Accessory functions."""
# std imports
import importlib.metadata

__all__ = ('get_version', 'name_unicode')


def get_version():
    """Return the installed version of the telnetstream distribution."""
    return importlib.metadata.version('telnetstream')


def name_unicode(ucs):
    """Return 7-bit ascii printable of any string."""
    # more or less the same as curses.ascii.unctrl -- but curses
    # module is conditionally excluded from many python distributions!
    bits = ord(ucs)
    if 32 <= bits <= 126:
        # ascii printable as one cell, as-is
        rep = chr(bits)
    elif bits == 127:
        rep = "^?"
    elif bits < 32:
        rep = "^" + chr(((bits & 0x7f) | 0x20) + 0x20)
    else:
        rep = r'\x{:02x}'.format(bits)
    return rep
