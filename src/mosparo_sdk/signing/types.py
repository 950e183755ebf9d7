"""
Type definitions for form data signing

This module provides the form data value types and the data class that
carries the signatures of a single verification request.
"""

from typing import Any, Dict, List, Mapping, Union
from dataclasses import dataclass


# Form values are text, None, booleans, numbers or nested containers of them
FormScalar = Union[str, None, bool, int, float]
FormValue = Union[FormScalar, List[Any], Mapping[str, Any]]
FormData = Mapping[str, FormValue]

SUBMIT_TOKEN_KEY = '_mosparo_submitToken'
VALIDATION_TOKEN_KEY = '_mosparo_validationToken'
RESERVED_KEYS = (SUBMIT_TOKEN_KEY, VALIDATION_TOKEN_KEY)

LIST_MARKER = '[]'


@dataclass(frozen=True)
class SignatureSet:
    """
    Signatures and payload of one verification request

    Attributes:
        validation_signature: HMAC of the validation token
        form_signature: HMAC of the canonical prepared form data
        verification_signature: HMAC of both signatures, kept client-side
        prepared_form_data: Canonicalized form data with hashed values
        request_body: Body sent to the verification endpoint
        request_signature: HMAC of endpoint and request body, used as password
    """
    validation_signature: str
    form_signature: str
    verification_signature: str
    prepared_form_data: Dict[str, Any]
    request_body: Dict[str, Any]
    request_signature: str
