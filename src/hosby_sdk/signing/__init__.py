"""
Request signing for Hosby Python SDK

This module provides PEM normalization and the RSA signer used to produce the
``x-signature`` header of every authenticated request.
"""

from .pem import (
    PEM_LINE_LENGTH,
    format_pem,
    has_pem_markers,
)
from .signer import (
    RequestSigner,
    Signer,
    SigningErrorCodes,
    compose_payload,
    generate_timestamp,
    verify_signature,
)

__all__ = [
    'PEM_LINE_LENGTH',
    'format_pem',
    'has_pem_markers',
    'RequestSigner',
    'Signer',
    'SigningErrorCodes',
    'compose_payload',
    'generate_timestamp',
    'verify_signature',
]
