"""Terms of Service analyzer: redact, chunk, analyze with an LLM and merge into one report."""

__version__ = "0.1.0"
