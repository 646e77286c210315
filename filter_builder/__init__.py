"""filter-builder: build, share and describe boolean record filters."""

__version__ = "0.1.0"
