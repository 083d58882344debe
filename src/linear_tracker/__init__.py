"""Task synchronization and conflict resolution between a local cache and Linear."""

__version__ = "0.1.0"
