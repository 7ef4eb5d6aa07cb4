"""Zonekeeper - DNS delegation tracking and Cloudflare onboarding."""

__version__ = "0.1.0"
