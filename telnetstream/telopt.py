"""Telnet command, sub-command and option byte values."""
# std imports
import enum

__all__ = (
    "Command",
    "SubCommand",
    "Option",
    "IAC",
    "DONT",
    "DO",
    "WONT",
    "WILL",
    "SB",
    "GA",
    "EL",
    "EC",
    "AYT",
    "AO",
    "IP",
    "BRK",
    "DM",
    "NOP",
    "SE",
    "IS",
    "SEND",
    "BINARY",
    "ECHO",
    "SGA",
    "STATUS",
    "TM",
    "TTYPE",
    "NAWS",
    "TSPEED",
    "LFLOW",
    "LINEMODE",
    "XDISPLOC",
    "NEW_ENVIRON",
    "CHARSET",
    "name_command",
    "name_option",
)


class Command(enum.IntEnum):
    """Telnet command bytes (RFC 854), each following an IAC byte."""

    SE = 240
    NOP = 241
    DM = 242
    BRK = 243
    IP = 244
    AO = 245
    AYT = 246
    EC = 247
    EL = 248
    GA = 249
    SB = 250
    WILL = 251
    WONT = 252
    DO = 253
    DONT = 254
    IAC = 255


class SubCommand(enum.IntEnum):
    """Sub-negotiation verbs shared by TTYPE (RFC 1091) and TSPEED (RFC 1079)."""

    IS = 0
    SEND = 1


class Option(enum.IntEnum):
    """Telnet option bytes, as they follow DO, DONT, WILL, WONT or SB."""

    BINARY = 0
    ECHO = 1
    SGA = 3
    STATUS = 5
    TM = 6
    TTYPE = 24
    NAWS = 31
    TSPEED = 32
    LFLOW = 33
    LINEMODE = 34
    XDISPLOC = 35
    NEW_ENVIRON = 39
    CHARSET = 42


(SE, NOP, DM, BRK, IP, AO, AYT, EC, EL, GA, SB, WILL, WONT, DO, DONT,
 IAC) = Command
(IS, SEND) = SubCommand
(BINARY, ECHO, SGA, STATUS, TM, TTYPE, NAWS, TSPEED, LFLOW, LINEMODE,
 XDISPLOC, NEW_ENVIRON, CHARSET) = Option

_COMMAND_NAMES = {int(cmd): cmd.name for cmd in Command}
_OPTION_NAMES = {int(opt): opt.name for opt in Option}


def name_command(byte):
    """Return string description for (maybe) telnet command byte."""
    return _COMMAND_NAMES.get(byte, repr(byte))


def name_option(byte):
    """Return string description for (maybe) telnet option byte."""
    return _OPTION_NAMES.get(byte, repr(byte))
