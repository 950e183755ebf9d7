"""
Hash functions for request signing

SHA-256 content hashes for form values and HMAC-SHA256 signatures keyed
by the project's private key. All digests are lowercase hex.
"""

import hashlib
import hmac as _hmac
from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.hmac import HMAC


def _to_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, bytes):
        return data
    return data.encode('utf-8')


def sha256_hex(data: Union[str, bytes]) -> str:
    """
    Calculate the SHA-256 hash of the given data.

    Args:
        data: Text (UTF-8 encoded before hashing) or bytes

    Returns:
        str: 64 character lowercase hex digest
    """
    return hashlib.sha256(_to_bytes(data)).hexdigest()


def hmac_sha256_hex(data: Union[str, bytes], key: Union[str, bytes]) -> str:
    """
    Calculate the HMAC-SHA256 signature of the given data.

    Args:
        data: Text or bytes to sign
        key: Private key used as HMAC secret

    Returns:
        str: 64 character lowercase hex digest
    """
    mac = HMAC(_to_bytes(key), hashes.SHA256())
    mac.update(_to_bytes(data))
    return mac.finalize().hex()


def signatures_match(expected: str, actual: object) -> bool:
    """Compare two hex signatures in constant time."""
    if not isinstance(expected, str) or not isinstance(actual, str):
        return False
    return _hmac.compare_digest(expected.encode('utf-8'), actual.encode('utf-8'))
