"""viewbind: bind JSON records to named view slots with defensive formatting."""

__version__ = "0.3.0"
