"""
PURPOSE: Version information for GH Paylink.

Reads the installed distribution's metadata once and caches it, falling back
to the in-tree version for source checkouts.
"""

from importlib.metadata import PackageNotFoundError, version
from typing import Any, Dict, Optional

__version__ = "1.0.0"

_version_cache: Optional[Dict[str, Any]] = None


def get_version() -> Dict[str, Any]:
    """
    PURPOSE: Retrieve version information for GH Paylink.

    Returns:
        Dict[str, Any]: {"version": str, "codename": str}
    """
    global _version_cache

    if _version_cache is not None:
        return _version_cache

    try:
        installed = version("gh-paylink")
    except PackageNotFoundError:
        installed = __version__

    _version_cache = {"version": installed, "codename": "Paylink"}
    return _version_cache
