"""Drive ML jobs and datafeeds to a declared state by polling the remote."""

__version__ = "0.1.0"
