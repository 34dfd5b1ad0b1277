"""Application workflows orchestrating runtime services and receipt processing."""
