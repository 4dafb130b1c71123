"""src/wayfetch/transport/tls.py

TLS configuration for Wayfetch.
"""

import ssl
from typing import Optional


def create_ssl_context(cafile: Optional[str] = None, verify: bool = True) -> ssl.SSLContext:
    """
    Creates a client SSL context with TLS 1.2 minimum.

    Args:
        cafile: Extra CA bundle to trust.
        verify: When False, certificates and host names are not checked.
    """
    context = ssl.create_default_context(cafile=cafile)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context
