"""taskpad: local task storage and queries with a small console front end."""

__version__ = "0.1.0"
