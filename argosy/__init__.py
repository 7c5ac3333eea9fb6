__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'argosy'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .maps import *
from .metadata import *
from .commands import *
from .options import *
from .validators import *
from .faults import *
from .logs import *

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
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the alias maps
__all__ += maps.__all__  # type: ignore[attr-defined]
# Load the exposed API of the metadata descriptors
__all__ += metadata.__all__  # type: ignore[attr-defined]
# Load the exposed API of the command tree
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the option helpers
__all__ += options.__all__  # type: ignore[attr-defined]
# Load the exposed API of the validators
__all__ += validators.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the logging helpers
__all__ += logs.__all__  # type: ignore[attr-defined]
