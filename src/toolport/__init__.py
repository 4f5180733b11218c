"""
toolport - tool server for AI agents

Exposes filesystem, git, HTTP fetch, system, memory, time and rule lookup
tools behind a schema-validated, security-gated invocation contract.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("toolport")
except PackageNotFoundError:
    __version__ = "0.1.0"

SERVER_NAME = "toolport"

__all__ = [
    "SERVER_NAME",
    "__version__",
]
