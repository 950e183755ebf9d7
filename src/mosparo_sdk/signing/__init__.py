"""
mosparo Python SDK - Signing Module

Canonical form data construction and the HMAC signature chain used to
authenticate requests against the mosparo API.
"""

from .types import (
    FormData,
    FormValue,
    SignatureSet,
    SUBMIT_TOKEN_KEY,
    VALIDATION_TOKEN_KEY,
    RESERVED_KEYS,
)

from .hashing import (
    sha256_hex,
    hmac_sha256_hex,
    signatures_match,
)

from .canonical import (
    cleanup_form_data,
    prepare_form_data,
    normalize_key,
    scalar_to_text,
)

from .serializer import (
    to_json,
    to_json_bytes,
)

from .request_helper import (
    RequestHelper,
    VERIFICATION_ENDPOINT,
)

# Public API exports
__all__ = [
    # Types
    'FormData',
    'FormValue',
    'SignatureSet',
    'SUBMIT_TOKEN_KEY',
    'VALIDATION_TOKEN_KEY',
    'RESERVED_KEYS',
    # Hashing
    'sha256_hex',
    'hmac_sha256_hex',
    'signatures_match',
    # Canonical form
    'cleanup_form_data',
    'prepare_form_data',
    'normalize_key',
    'scalar_to_text',
    # Serialization
    'to_json',
    'to_json_bytes',
    # Signature chain
    'RequestHelper',
    'VERIFICATION_ENDPOINT',
]
