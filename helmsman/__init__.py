__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'helmsman'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .arguments import *
from .options import *
from .validation import *
from .tokens import *
from .matching import *
from .extraction import *
from .completion import *
from .parsing import *
from .faults import *

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

# Argument specs and the declaration layer
__all__ += arguments.__all__  # type: ignore[attr-defined]
__all__ += options.__all__  # type: ignore[attr-defined]
__all__ += validation.__all__  # type: ignore[attr-defined]
# Parsing core
__all__ += tokens.__all__  # type: ignore[attr-defined]
__all__ += matching.__all__  # type: ignore[attr-defined]
__all__ += extraction.__all__  # type: ignore[attr-defined]
__all__ += completion.__all__  # type: ignore[attr-defined]
__all__ += parsing.__all__  # type: ignore[attr-defined]
# Faults
__all__ += faults.__all__  # type: ignore[attr-defined]
