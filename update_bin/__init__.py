__version__ = "0.1.0"

from update_bin.errors import (  # noqa: E402
    BinaryNotFoundError,
    ManagerUnavailableError,
    SubprocessFailureError,
    UnknownOwnerError,
    UpdateBinError,
)
from update_bin.models import (  # noqa: E402
    DEFAULT_PRIORITY,
    PackageManagerKind,
    Resolution,
    UpdateCommand,
    UpdateOutcome,
)

__all__ = [
    "__version__",
    "BinaryNotFoundError",
    "DEFAULT_PRIORITY",
    "ManagerUnavailableError",
    "PackageManagerKind",
    "Resolution",
    "SubprocessFailureError",
    "UnknownOwnerError",
    "UpdateBinError",
    "UpdateCommand",
    "UpdateOutcome",
]
