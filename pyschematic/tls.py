# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
TLS configuration for schema registry connections.

Whether TLS is used at all is decided by the base URL scheme; this only
controls how certificates are verified and presented.
"""

from __future__ import annotations

import ssl
from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class TLSConfig:
    """
    TLS/SSL configuration for https registries.

    Security Levels:
    - TLS (Server Auth): system CA store (default)
    - TLS + CA: Custom CA certificate (private PKI)
    - Mutual TLS: Client + server certificates
    - Insecure TLS: Skip certificate verification (testing/debugging only)

    Examples:
        # Mutual TLS against a private CA
        >>> tls = TLSConfig(
        ...     cert_file="/path/to/client.crt",
        ...     key_file="/path/to/client.key",
        ...     ca_file="/path/to/ca.crt",
        ... )

        # Insecure TLS (skip certificate verification)
        >>> tls = TLSConfig(insecure_skip_verify=True)
    """

    cert_file: Optional[str] = None
    """Path to client certificate file (for mutual TLS)."""

    key_file: Optional[str] = None
    """Path to client private key file (for mutual TLS)."""

    ca_file: Optional[str] = None
    """Path to CA certificate file for server verification."""

    insecure_skip_verify: bool = False
    """Skip certificate verification (INSECURE - use only for testing)."""

    def verify(self) -> Union[bool, ssl.SSLContext]:
        """Build the value for httpx's ``verify`` argument."""
        if self.insecure_skip_verify:
            return False

        context = ssl.create_default_context()
        if self.ca_file:
            context.load_verify_locations(self.ca_file)
        if self.cert_file and self.key_file:
            context.load_cert_chain(self.cert_file, self.key_file)
        return context
