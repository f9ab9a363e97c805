"""projsnap: portable JSON snapshots of source trees."""

__version__ = "1.0.0"
