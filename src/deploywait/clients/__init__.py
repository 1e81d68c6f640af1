"""API clients for external services."""

from deploywait.clients.netlify import NetlifyClient
from deploywait.clients.probe import UrlProbe

__all__ = ["NetlifyClient", "UrlProbe"]
