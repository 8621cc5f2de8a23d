"""Privacy-first web search gateway for a local LLM desktop app."""

__version__ = "1.0.0"
