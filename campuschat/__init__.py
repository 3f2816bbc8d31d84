"""Direct-messaging service for the advising platform."""

__version__ = "0.1.0"
