"""opcorr: operation correlation context propagation for telemetry clients."""

from importlib import metadata

from .config import OpcorrSettings, get_settings
from .errors import InvalidArgumentError, OpcorrError

__all__ = ["InvalidArgumentError", "OpcorrError", "OpcorrSettings", "get_settings", "__version__"]


def _load_version() -> str:
    try:
        version = metadata.version("opcorr")
        return str(version) if version is not None else "0.0.0"
    except metadata.PackageNotFoundError:
        return "0.0.0"


__version__ = _load_version()
