"""Manage DNS records of Simply.com zones: records, API client and provider."""

__version__ = "0.1.0"