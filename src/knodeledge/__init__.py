"""
kNODEledge - A backend for authoring graphically-summarized notes.

Notes are organized as Projects -> Chapters -> Sections. Each section of a
chapter is kept either as a small knowledge-graph node or as flat paper text.

This version uses synchronous operations.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("knodeledge")
except PackageNotFoundError:
    __version__ = "0.1.0"
