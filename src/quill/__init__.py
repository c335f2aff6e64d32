"""Quill — blog content API.

Users, credentials, articles and tags over a relational store, with
keyset-paginated list endpoints and stateless JWT sessions that a
password change invalidates in one write.
"""

__version__ = "0.1.0"
