"""
GSSSS SDOF response package.

This __init__ stays lightweight so that `import gssss_sdof` and
`gssss-sdof --help` work without importing the numerical core.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("gssss-sdof")
except PackageNotFoundError:  # during editable installs
    __version__ = "0.0.0"

__all__ = ["__version__"]
