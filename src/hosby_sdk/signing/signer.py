"""
RSA request signing for the Hosby API

Every authenticated request carries an ``x-signature`` header: an RSA
PKCS#1 v1.5 signature, over a SHA-256 digest, of
``"{apiKeyId}_{projectId}_{userId}:{timestampMillis}"``. This module provides
the signer implementation and the helpers to compose the signed payload.
"""

import base64
import hashlib
import logging
import time
from typing import Dict, Protocol, Union, runtime_checkable

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from ..exceptions import SigningError
from .pem import format_pem, has_pem_markers

logger = logging.getLogger(__name__)

SIGNATURE_HASH_ALGORITHM = "sha256"


class SigningErrorCodes:
    """Standard error codes for signing operations"""
    MISSING_INPUT = "MISSING_INPUT"
    INVALID_PRIVATE_KEY = "INVALID_PRIVATE_KEY"
    SIGNING_FAILED = "SIGNING_FAILED"
    EMPTY_SIGNATURE = "EMPTY_SIGNATURE"


@runtime_checkable
class Signer(Protocol):
    """Protocol for request signers injected into the header builder"""

    def sign(self, payload: str, private_key: str) -> str:
        """Return the encoded signature of ``payload``"""
        ...


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp in milliseconds.

    Returns:
        int: Milliseconds since epoch
    """
    return int(time.time() * 1000)


def compose_payload(api_key: str, timestamp: Union[int, str]) -> str:
    """Build the string covered by the request signature."""
    return f"{api_key}:{timestamp}"


class RequestSigner:
    """
    RSA signer for Hosby request signatures

    Loaded key objects are cached per normalized PEM so repeated requests do
    not re-parse the key.
    """

    def __init__(self):
        self._keys: Dict[str, rsa.RSAPrivateKey] = {}

    def sign(self, payload: str, private_key: str) -> str:
        """
        Sign a payload with an RSA private key.

        Args:
            payload: String to sign
            private_key: RSA private key in PEM format, raw base64, or with sk_ prefix

        Returns:
            str: Base64-encoded signature

        Raises:
            SigningError: If inputs are missing, the key is malformed or signing fails
        """
        if not payload or not private_key:
            raise SigningError(
                "Data and private key are required for signing",
                SigningErrorCodes.MISSING_INPUT
            )

        pem = format_pem(private_key)
        if not has_pem_markers(pem):
            raise SigningError(
                "Signature error: Invalid private key format: missing BEGIN/END markers",
                SigningErrorCodes.INVALID_PRIVATE_KEY
            )

        key = self._load_key(pem)

        digest = hashlib.sha256(payload.encode('utf-8')).digest()
        logger.debug(f"Signing payload digest {digest.hex()} with {SIGNATURE_HASH_ALGORITHM}")

        try:
            signature = key.sign(digest, padding.PKCS1v15(), Prehashed(hashes.SHA256()))
        except Exception as e:
            raise SigningError(f"Signature error: {e}", SigningErrorCodes.SIGNING_FAILED) from e

        if not signature:
            raise SigningError(
                "Signature error: Failed to generate signature - signing primitive returned no data",
                SigningErrorCodes.EMPTY_SIGNATURE
            )

        return base64.b64encode(signature).decode('ascii')

    def _load_key(self, pem: str) -> rsa.RSAPrivateKey:
        """Load and cache the RSA key for a normalized PEM block."""
        cached = self._keys.get(pem)
        if cached is not None:
            return cached

        try:
            key = serialization.load_pem_private_key(pem.encode('ascii'), password=None)
        except Exception as e:
            raise SigningError(
                f"Signature error: {e}",
                SigningErrorCodes.INVALID_PRIVATE_KEY
            ) from e

        if not isinstance(key, rsa.RSAPrivateKey):
            raise SigningError(
                "Signature error: private key must be an RSA key",
                SigningErrorCodes.INVALID_PRIVATE_KEY
            )

        self._keys[pem] = key
        return key


def verify_signature(payload: str, signature: str, public_key_pem: str) -> bool:
    """
    Verify a request signature against an RSA public key.

    Args:
        payload: Signed string
        signature: Base64-encoded signature
        public_key_pem: RSA public key, PEM or raw base64 (optionally pk_ prefixed)

    Returns:
        bool: True if the signature matches
    """
    pem = format_pem(public_key_pem, "PUBLIC KEY")
    try:
        public_key = serialization.load_pem_public_key(pem.encode('ascii'))
        public_key.verify(
            base64.b64decode(signature),
            payload.encode('utf-8'),
            padding.PKCS1v15(),
            hashes.SHA256()
        )
        return True
    except Exception as e:
        logger.debug(f"Signature verification failed: {e}")
        return False
