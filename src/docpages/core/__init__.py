"""Core page generation: locating, fetching, parsing, rendering, composing."""
