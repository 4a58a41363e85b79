"""
CI Client module.

HTTP access to the CI server's build endpoint and the ci-builds CLI.
"""

from .client import HTTPBuildSource
from .transport import HTTPTransport

__all__ = ["HTTPBuildSource", "HTTPTransport"]
