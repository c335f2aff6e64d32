"""Authentication.

Learn: Users log in with username/password and receive a JWT access +
refresh pair. Every protected request presents the access token as a
Bearer header; validity is recomputed each time (signature, expiry, and
the user's password-change watermark). No sessions are stored.
"""
