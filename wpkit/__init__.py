"""wpkit: scaffold, inspect and remove local WordPress sites."""

__version__ = "0.1.0"
