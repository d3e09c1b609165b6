"""telnetstream: a Telnet protocol engine over a polled byte stream."""
# pylint: disable=wildcard-import,undefined-variable
from .handler import *          # noqa
from .stream import *           # noqa
from .suspend import *          # noqa
from .notify import *           # noqa
from .timeout import *          # noqa
from .telopt import *           # noqa
from .accessories import get_version as __get_version

__all__ = (
    handler.__all__ +
    stream.__all__ +
    suspend.__all__ +
    notify.__all__ +
    timeout.__all__ +
    telopt.__all__
)  # noqa

__version__ = __get_version()
