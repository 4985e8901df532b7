"""Embedded-style benchmark kernels (tarfind, ud, wikisort, statemate) with a small deterministic runtime."""

__version__ = "0.1.0"