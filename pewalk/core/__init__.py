"""PeWalk core: records, errors and the image walker."""
