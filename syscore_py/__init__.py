"""
Syscore - installed-application inventory for Windows hosts.

Merge what every source knows, trust the ones that know best.
"""

from importlib.metadata import version as _version

__version__ = _version("syscore")
