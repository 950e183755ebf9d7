"""
mosparo API client

This module provides the client that verifies form submissions with a
mosparo installation and reads project statistics.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from .config import ClientConfig
from .exceptions import ConfigurationError, ProtocolError, ServiceError
from .results import RulePackageImportResult, StatisticResult, VerificationResult
from .signing import (
    FormData,
    RequestHelper,
    SUBMIT_TOKEN_KEY,
    VALIDATION_TOKEN_KEY,
    VERIFICATION_ENDPOINT,
    signatures_match,
)
from .transport import RequestsTransport, SignedRequest, Transport

logger = logging.getLogger(__name__)

STATISTIC_BY_DATE_ENDPOINT = '/api/v1/statistic/by-date'
RULE_PACKAGE_IMPORT_ENDPOINT = '/api/v1/rule-package/import'


class MosparoClient:
    """
    Client for the mosparo API.

    Every call signs its request with the project's private key and sends
    exactly one HTTP request through the transport. Nothing is cached or
    retried, so one client can be used from several threads.
    """

    def __init__(
        self,
        host: str,
        public_key: str,
        private_key: str,
        transport_options: Optional[Dict[str, Any]] = None,
        transport: Optional[Transport] = None
    ):
        """
        Initialize the client.

        Args:
            host: Host of the mosparo installation
            public_key: Public key of the mosparo project
            private_key: Private key of the mosparo project
            transport_options: Options for the default transport
                (timeout, verify_ssl, proxies, further requests arguments)
            transport: Transport to use instead of the default one
        """
        self.host = host
        self._helper = RequestHelper(public_key, private_key)

        if transport is None:
            transport = RequestsTransport(host, **(transport_options or {}))
        self._transport = transport

        logger.info(f"Initialized mosparo client for host: {host}")

    @classmethod
    def from_config(cls, config: ClientConfig, transport: Optional[Transport] = None) -> 'MosparoClient':
        """Create a client from a ``ClientConfig``."""
        return cls(
            config.host,
            config.public_key,
            config.private_key,
            transport_options=config.to_transport_options(),
            transport=transport
        )

    @property
    def public_key(self) -> str:
        return self._helper.public_key

    def __repr__(self) -> str:
        return f"MosparoClient(host={self.host!r}, public_key={self.public_key!r})"

    def verify_submission(
        self,
        form_data: FormData,
        submit_token: Optional[str] = None,
        validation_token: Optional[str] = None
    ) -> VerificationResult:
        """
        Verify the given form data with the configured mosparo installation.

        If the tokens are not passed explicitly they are read from the
        ``_mosparo_submitToken`` and ``_mosparo_validationToken`` fields.

        A rejected submission is not an error; check
        ``VerificationResult.submittable`` before accepting the form.

        Args:
            form_data: Submitted form data
            submit_token: Submit token of the form
            validation_token: Validation token of the form

        Returns:
            VerificationResult: Result of the verification

        Raises:
            ConfigurationError: Submit or validation token not available
            TransportError: The request could not be sent
            ProtocolError: The response was empty or invalid
        """
        form_data = form_data or {}

        if submit_token is None:
            submit_token = form_data.get(SUBMIT_TOKEN_KEY)
        if validation_token is None:
            validation_token = form_data.get(VALIDATION_TOKEN_KEY)

        if not _is_token(submit_token) or not _is_token(validation_token):
            raise ConfigurationError()

        signatures = self._helper.build_verification_request(form_data, submit_token, validation_token)

        response = self._send(SignedRequest(
            method='POST',
            path=VERIFICATION_ENDPOINT,
            public_key=self.public_key,
            request_signature=signatures.request_signature,
            body=signatures.request_body,
        ))

        valid = response.get('valid') is True
        issues = list(response.get('issues') or [])
        debug_information = None

        submittable = valid and signatures_match(
            signatures.verification_signature,
            response.get('verificationSignature')
        )

        if not submittable:
            if valid:
                logger.warning("Verification signature returned by mosparo does not match")
            elif response.get('error'):
                issues.append({'message': response.get('errorMessage')})
                debug_information = response.get('debugInformation')
            logger.debug("Submission is not submittable")

        verified_fields = response.get('verifiedFields')
        if not isinstance(verified_fields, dict):
            verified_fields = {}

        return VerificationResult(
            submittable=submittable,
            valid=valid,
            verified_fields=verified_fields,
            issues=issues,
            debug_information=debug_information,
        )

    def get_statistic_by_date(
        self,
        range_seconds: int = 0,
        start_date: Optional[Union[date, str]] = None
    ) -> StatisticResult:
        """
        Retrieve the submission statistics of the project.

        Args:
            range_seconds: Time range in seconds, 0 for the server default
            start_date: First day of the statistics

        Returns:
            StatisticResult: Numbers of valid and spam submissions

        Raises:
            ServiceError: mosparo reported an error
            TransportError: The request could not be sent
            ProtocolError: The response was empty or invalid
        """
        query: Dict[str, Any] = {}
        if range_seconds > 0:
            query['range'] = range_seconds
        if start_date is not None:
            query['startDate'] = _format_date(start_date)

        response = self._send(SignedRequest(
            method='GET',
            path=STATISTIC_BY_DATE_ENDPOINT,
            public_key=self.public_key,
            request_signature=self._helper.create_request_signature(STATISTIC_BY_DATE_ENDPOINT, query),
            query=query,
        ))
        _raise_for_service_error(response)

        data = response.get('data')
        if not isinstance(data, dict):
            raise ProtocolError()

        numbers_by_date = data.get('numbersByDate')
        if not isinstance(numbers_by_date, dict):
            numbers_by_date = {}

        return StatisticResult(
            number_of_valid_submissions=int(data.get('numberOfValidSubmissions') or 0),
            number_of_spam_submissions=int(data.get('numberOfSpamSubmissions') or 0),
            numbers_by_date=numbers_by_date,
        )

    def store_rule_package(
        self,
        rule_package_id: Union[int, str],
        rule_package_content: str,
        rule_package_hash: str
    ) -> RulePackageImportResult:
        """
        Import the content of a rule package into mosparo.

        Args:
            rule_package_id: ID of the rule package in mosparo
            rule_package_content: JSON content of the rule package
            rule_package_hash: SHA-256 hash of the content

        Returns:
            RulePackageImportResult: Import status

        Raises:
            ServiceError: mosparo reported an error
            TransportError: The request could not be sent
            ProtocolError: The response was empty or invalid
        """
        body = {
            'rulePackageId': rule_package_id,
            'rulePackageContent': rule_package_content,
            'rulePackageHash': rule_package_hash,
        }

        response = self._send(SignedRequest(
            method='POST',
            path=RULE_PACKAGE_IMPORT_ENDPOINT,
            public_key=self.public_key,
            request_signature=self._helper.create_request_signature(RULE_PACKAGE_IMPORT_ENDPOINT, body),
            body=body,
        ))
        _raise_for_service_error(response)

        return RulePackageImportResult(
            successful=response.get('successful') is True,
            hash_validated=response.get('verifiedHash') is True,
        )

    def _send(self, request: SignedRequest) -> Dict[str, Any]:
        """Send the request and decode the JSON response."""
        body = self._transport.send(request)

        try:
            result = json.loads(body) if body else None
        except ValueError as e:
            raise ProtocolError(details={'reason': str(e)}) from e

        if not result or not isinstance(result, dict):
            raise ProtocolError()

        return result


def _is_token(value: Any) -> bool:
    if not isinstance(value, str) or value == '':
        return False
    try:
        value.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True


def _format_date(value: Union[date, str]) -> str:
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    return str(value)


def _raise_for_service_error(response: Dict[str, Any]) -> None:
    if response.get('error'):
        raise ServiceError(
            response.get('errorMessage') or 'Unknown error',
            response.get('debugInformation')
        )
