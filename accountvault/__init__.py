"""
Account Vault for the FileShare desktop client.
Copyright (c) 2025

THREAT MODEL:
Saved logins are kept on the local device only, with the email and password of
each account encrypted under a master key generated on first use. The goal is
that secrets are never stored in cleartext on disk. Anyone who can already read
and write the configuration directory can read the key as well; the vault does
not defend against a compromised host.
"""

__version__ = "1.0.0"
