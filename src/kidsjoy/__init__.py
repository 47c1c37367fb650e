"""Kids Joy - vocabulary learning client for children.

The package is organised around the catalog controller, which owns the
persisted vocabulary catalog, the generated image cache and the speech
delivery pipeline.
"""

from kidsjoy.version import __version__

__all__ = ["__version__"]
