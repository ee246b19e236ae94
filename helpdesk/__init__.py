"""Help-desk ticketing web application."""

__version__ = "0.3.0"
