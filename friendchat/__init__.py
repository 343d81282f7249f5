"""friendchat - friend graph and conversation access-control engine."""

__version__ = "1.0.0"
