"""HireSmart: curate a balanced five-person team from a candidate pool."""

__version__ = "0.1.0"
