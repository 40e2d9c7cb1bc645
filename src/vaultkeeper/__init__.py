"""
VaultKeeper - personal encrypted storage service.

Bank cards, login/password pairs, notes and files, each sensitive field
encrypted with AES-256-GCM under a per-user secret phrase.
"""

__version__ = "0.1.0"
