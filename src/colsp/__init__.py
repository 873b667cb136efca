"""colsp – Colang Language Server."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version('colsp')
except PackageNotFoundError:
    # Running from a source checkout that was never installed.
    __version__ = '0.0.0.dev0'
