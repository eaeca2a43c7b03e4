"""localpub — local Maven-layout publication and snapshot collection."""

__version__ = "0.1.0"
