"""Request-handling core of an AI gateway: rules, provider schemas, forwarding and stream relaying."""

__version__ = "0.1.0"