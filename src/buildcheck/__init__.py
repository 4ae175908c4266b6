"""buildcheck - project health verifier and log diagnostician."""

__version__ = "0.1.0"
