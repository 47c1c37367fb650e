"""Version information for Kids Joy.

The version comes from the installed distribution metadata, with a
fallback for running from a source checkout.
"""

from importlib.metadata import PackageNotFoundError, version

# Version info
__version__ = "0.5.0"  # Fallback version
__license__ = "MIT"


def get_version() -> str:
    """Get the current version string.

    Returns:
        Version string (e.g., "0.5.0").
    """
    try:
        return version("kidsjoy")
    except PackageNotFoundError:
        return __version__
