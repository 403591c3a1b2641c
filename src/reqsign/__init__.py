"""
reqsign: HMAC request signing for service-to-service HTTP.

Signs a canonical form of an HTTP request together with an expiry
timestamp, and verifies both on the receiving side.
"""

__version__ = "1.0.0"
