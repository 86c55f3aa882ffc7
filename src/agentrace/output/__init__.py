"""Console and file output for race snapshots."""

from .console import ConsoleOutput
from .export import Exporter

__all__ = ["ConsoleOutput", "Exporter"]
