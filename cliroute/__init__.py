__title__ = 'cliroute'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .application import *
from .commands import *
from .config import *
from .context import *
from .faults import *
from .logger import *
from .options import *
from .trie import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the application layer
__all__ += application.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands tree
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the configuration
__all__ += config.__all__  # type: ignore[attr-defined]
# Load the exposed API of the session context
__all__ += context.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the session loggers
__all__ += logger.__all__  # type: ignore[attr-defined]
# Load the exposed API of the option parser
__all__ += options.__all__  # type: ignore[attr-defined]
# Load the exposed API of the character trie
__all__ += trie.__all__  # type: ignore[attr-defined]
