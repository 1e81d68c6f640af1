"""deploywait - block a pipeline until a Netlify deploy is live."""

__version__ = "0.1.0"
