"""Trade Journal - import, journal and analyse your trades."""

__version__ = "0.1.0"
