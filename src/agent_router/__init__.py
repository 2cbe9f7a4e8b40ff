"""agent-router: rule-driven routing of tasks to specialised agents."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("agent-router")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
