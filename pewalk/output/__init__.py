"""PeWalk output: Rich console rendering and JSON reports."""

from pewalk.output.console import PeWalkConsoleOutput
from pewalk.output.report import PeWalkReportGenerator

__all__ = ["PeWalkConsoleOutput", "PeWalkReportGenerator"]
