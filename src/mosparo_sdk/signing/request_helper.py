"""
Signature chain builder for mosparo API requests

The RequestHelper binds the canonical form data, the submit token and the
validation token together through a chain of HMAC signatures:

    validation_signature   = HMAC(validation_token)
    form_signature         = HMAC(to_json(prepared_form_data))
    verification_signature = HMAC(validation_signature + form_signature)
    request_signature      = HMAC(endpoint + to_json(request_body))

The verification signature is never sent; mosparo echoes it back and the
client compares it to decide whether the submission is trustworthy.
"""

import logging
from typing import Any, Dict, Optional

from .canonical import cleanup_form_data, prepare_form_data
from .hashing import hmac_sha256_hex
from .serializer import to_json
from .types import FormData, SignatureSet

logger = logging.getLogger(__name__)

VERIFICATION_ENDPOINT = '/api/v1/verification/verify'


class RequestHelper:
    """
    Helper that creates the signatures for the mosparo API.

    The keys are read-only after construction, so a single helper can be
    shared between threads.
    """

    def __init__(self, public_key: str, private_key: str):
        """
        Initialize the request helper.

        Args:
            public_key: Public key of the mosparo project
            private_key: Private key of the mosparo project
        """
        self._public_key = public_key
        self._private_key = private_key

    @property
    def public_key(self) -> str:
        return self._public_key

    def __repr__(self) -> str:
        return f"RequestHelper(public_key={self._public_key!r}, private_key='***')"

    def create_hmac_hash(self, data: str) -> str:
        """Create the HMAC hash for the given string."""
        return hmac_sha256_hex(data, self._private_key)

    def prepare_form_data(self, form_data: FormData) -> Dict[str, Any]:
        """Hash all form values and return the canonical form data."""
        return prepare_form_data(form_data)

    def cleanup_form_data(self, form_data: FormData) -> Dict[str, Any]:
        """Remove control fields, normalize keys and line breaks."""
        return cleanup_form_data(form_data)

    def to_json(self, data: Any) -> str:
        return to_json(data)

    def create_form_data_hmac_hash(self, form_data: FormData) -> str:
        """
        Create the HMAC hash for the given form data.

        Args:
            form_data: Form data as returned by ``prepare_form_data``

        Returns:
            str: Hex encoded form signature
        """
        return self.create_hmac_hash(self.to_json(form_data))

    def create_request_signature(self, endpoint: str, payload: Optional[Dict[str, Any]]) -> str:
        """
        Create the signature that authenticates a request.

        Args:
            endpoint: API endpoint path, e.g. ``/api/v1/verification/verify``
            payload: Request body or query parameters

        Returns:
            str: Hex encoded request signature, used as basic auth password
        """
        return self.create_hmac_hash(endpoint + self.to_json(payload if payload is not None else {}))

    def build_verification_request(
        self,
        form_data: FormData,
        submit_token: str,
        validation_token: str,
        endpoint: str = VERIFICATION_ENDPOINT
    ) -> SignatureSet:
        """
        Build all signatures for a verification request.

        Args:
            form_data: Submitted form data (control fields are ignored)
            submit_token: Submit token of the form
            validation_token: Validation token of the form
            endpoint: Verification endpoint path

        Returns:
            SignatureSet: Signatures, prepared form data and request body
        """
        prepared_form_data = self.prepare_form_data(form_data)
        form_signature = self.create_form_data_hmac_hash(prepared_form_data)

        validation_signature = self.create_hmac_hash(validation_token)
        verification_signature = self.create_hmac_hash(validation_signature + form_signature)

        request_body = {
            'submitToken': submit_token,
            'validationSignature': validation_signature,
            'formSignature': form_signature,
            'formData': prepared_form_data,
        }
        request_signature = self.create_request_signature(endpoint, request_body)

        logger.debug(f"Built verification request with {len(prepared_form_data)} form fields")

        return SignatureSet(
            validation_signature=validation_signature,
            form_signature=form_signature,
            verification_signature=verification_signature,
            prepared_form_data=prepared_form_data,
            request_body=request_body,
            request_signature=request_signature,
        )
