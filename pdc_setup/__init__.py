"""PDC database setup wizard and sqlcmd script runner."""

__version__ = "1.0.0"
