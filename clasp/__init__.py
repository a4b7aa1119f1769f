__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'clasp'
__author__ = 'clasp contributors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

from .arguments import *
from .faults import *
from .kinds import *
from .lists import *
from .logs import *
from .schema import *
from .scanner import TOGGLE
from . import usage as _usage
from .usage import *
from .verifiers import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
    "TOGGLE",
)

# Load the exposed API of the definitions
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the value kinds
__all__ += kinds.__all__  # type: ignore[attr-defined]
# Load the exposed API of the list accumulator
__all__ += lists.__all__  # type: ignore[attr-defined]
# Load the exposed API of the logging sink
__all__ += logs.__all__  # type: ignore[attr-defined]
# Load the exposed API of the schemas
__all__ += schema.__all__  # type: ignore[attr-defined]
# Load the exposed API of the usage renderer
__all__ += _usage.__all__
# Load the exposed API of the verifiers
__all__ += verifiers.__all__  # type: ignore[attr-defined]
del _usage
