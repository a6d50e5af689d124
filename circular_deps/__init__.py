"""circular-deps: detect circular imports and diff them against an approved golden."""

__version__ = "0.1.0"
