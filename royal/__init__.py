"""Royal — Discord mention bot for OpenAI-compatible chat APIs."""

__version__ = "0.3.0"
