"""Capability providers for the Google Docs module."""
