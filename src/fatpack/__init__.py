"""fatpack - universal mobile package assembler.

Sequences the media-engine, core-library and application-platform builds,
merges their per-architecture outputs into universal binaries and packages
the results under a single output root.
"""

__version__ = "0.1.0"
