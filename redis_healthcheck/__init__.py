"""Redis health check plugin for the CRM system status page."""

__version__ = "1.0.0"
