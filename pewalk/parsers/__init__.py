"""PeWalk parsers: field reader and fixed-layout PE header decoders."""
