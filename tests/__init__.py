"""PeWalk test suite."""
