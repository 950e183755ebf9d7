"""
Tests for the mosparo client

These tests run the client against a recording transport so every request
the client makes can be inspected without network access.
"""

import json
from datetime import date

import pytest

from mosparo_sdk import (
    MosparoClient,
    ClientConfig,
    ConfigurationError,
    TransportError,
    ProtocolError,
    ServiceError,
    FieldStatus,
    VerificationResult,
    StatisticResult,
    RulePackageImportResult,
    SignedRequest,
    VERIFICATION_ENDPOINT,
    STATISTIC_BY_DATE_ENDPOINT,
    RULE_PACKAGE_IMPORT_ENDPOINT,
)
from mosparo_sdk.signing import hmac_sha256_hex, prepare_form_data, to_json


PUBLIC_KEY = 'testPublicKey'
PRIVATE_KEY = 'testPrivateKey'
SUBMIT_TOKEN = 'submitToken'
VALIDATION_TOKEN = 'validationToken'
FORM_DATA = {'name': 'John Example'}


class RecordingTransport:
    """Transport that records requests and replays prepared responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def send(self, request: SignedRequest) -> str:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, (dict, list)):
            return json.dumps(response)
        return response


def create_client(transport):
    return MosparoClient('http://test.local', PUBLIC_KEY, PRIVATE_KEY, transport=transport)


def expected_signatures(form_data=FORM_DATA):
    """Compute the signatures the way mosparo does."""
    prepared = prepare_form_data(form_data)
    form_signature = hmac_sha256_hex(to_json(prepared), PRIVATE_KEY)
    validation_signature = hmac_sha256_hex(VALIDATION_TOKEN, PRIVATE_KEY)
    verification_signature = hmac_sha256_hex(validation_signature + form_signature, PRIVATE_KEY)
    return prepared, form_signature, validation_signature, verification_signature


class TestVerifySubmissionTokens:
    """Test token lookup before any request is sent"""

    def test_without_tokens(self):
        """Missing tokens fail before any request"""
        transport = RecordingTransport()
        client = create_client(transport)

        with pytest.raises(ConfigurationError, match='Submit or validation token not available.'):
            client.verify_submission({'name': 'John Example'})

        assert transport.requests == []

    def test_without_validation_token(self):
        """A single token is not enough"""
        transport = RecordingTransport()
        client = create_client(transport)

        with pytest.raises(ConfigurationError):
            client.verify_submission({'name': 'John Example', '_mosparo_submitToken': SUBMIT_TOKEN})

        assert transport.requests == []

    def test_empty_token_is_missing(self):
        """Empty tokens are treated as missing"""
        transport = RecordingTransport()
        client = create_client(transport)

        with pytest.raises(ConfigurationError):
            client.verify_submission(FORM_DATA, '', VALIDATION_TOKEN)

        assert transport.requests == []

    def test_unencodable_token_is_rejected(self):
        """Tokens that are not valid UTF-8 text fail before any request"""
        transport = RecordingTransport()
        client = create_client(transport)

        with pytest.raises(ConfigurationError):
            client.verify_submission(FORM_DATA, '\udfff', VALIDATION_TOKEN)

        with pytest.raises(ConfigurationError):
            client.verify_submission(FORM_DATA, SUBMIT_TOKEN, 'token\ud800')

        assert transport.requests == []

    def test_tokens_from_form_data(self):
        """Tokens are read from the control fields"""
        _, _, _, verification_signature = expected_signatures()
        transport = RecordingTransport({'valid': True, 'verificationSignature': verification_signature})
        client = create_client(transport)

        result = client.verify_submission({
            'name': 'John Example',
            '_mosparo_submitToken': SUBMIT_TOKEN,
            '_mosparo_validationToken': VALIDATION_TOKEN,
        })

        assert result.submittable is True
        assert transport.requests[0].body['submitToken'] == SUBMIT_TOKEN
        assert '_mosparo_submittoken' not in transport.requests[0].body['formData']


class TestVerifySubmission:
    """Test verification requests and responses"""

    def test_is_valid(self):
        """Matching verification signature makes the submission submittable"""
        prepared, form_signature, validation_signature, verification_signature = expected_signatures()
        transport = RecordingTransport({'valid': True, 'verificationSignature': verification_signature})
        client = create_client(transport)

        result = client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

        assert isinstance(result, VerificationResult)
        assert result.is_submittable()
        assert result.is_valid()
        assert not result.has_issues()
        assert len(transport.requests) == 1

        request = transport.requests[0]
        assert request.method == 'POST'
        assert request.path == VERIFICATION_ENDPOINT
        assert request.auth[0] == PUBLIC_KEY
        assert request.headers['Accept'] == 'application/json'
        assert request.body == {
            'submitToken': SUBMIT_TOKEN,
            'validationSignature': validation_signature,
            'formSignature': form_signature,
            'formData': prepared,
        }
        assert request.request_signature == hmac_sha256_hex(
            VERIFICATION_ENDPOINT + to_json(request.body),
            PRIVATE_KEY
        )

    def test_is_not_valid(self):
        """An error response is reported as issue"""
        transport = RecordingTransport({'error': True, 'errorMessage': 'Validation failed.'})
        client = create_client(transport)

        result = client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

        assert result.submittable is False
        assert result.valid is False
        assert result.issues == [{'message': 'Validation failed.'}]
        assert result.debug_information is None
        assert len(transport.requests) == 1

    def test_error_with_debug_information(self):
        """Debug information is kept for error responses"""
        transport = RecordingTransport({
            'error': True,
            'errorMessage': 'Validation failed.',
            'debugInformation': {'reason': 'token expired'},
        })
        client = create_client(transport)

        result = client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

        assert result.get_debug_information() == {'reason': 'token expired'}

    def test_signature_mismatch(self):
        """A valid verdict with a wrong signature is not submittable"""
        transport = RecordingTransport({
            'valid': True,
            'verificationSignature': 'a' * 64,
            'verifiedFields': {'name': 'valid'},
        })
        client = create_client(transport)

        result = client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

        assert result.submittable is False
        assert result.valid is True
        assert result.issues == []

    def test_verified_fields_and_issues(self):
        """Verified fields and issues are passed through"""
        transport = RecordingTransport({
            'valid': False,
            'verificationSignature': None,
            'verifiedFields': {'name': 'invalid'},
            'issues': [{'name': 'name', 'message': 'Field not valid.'}],
        })
        client = create_client(transport)

        result = client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

        assert result.submittable is False
        assert result.get_verified_field('name') == FieldStatus.INVALID
        assert result.get_verified_field('email') == FieldStatus.NOT_VERIFIED
        assert result.issues == [{'name': 'name', 'message': 'Field not valid.'}]

    def test_verified_fields_empty_list(self):
        """An empty list of verified fields becomes an empty mapping"""
        transport = RecordingTransport({'valid': False, 'verifiedFields': []})
        client = create_client(transport)

        result = client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

        assert result.verified_fields == {}

    def test_empty_response(self):
        """An empty JSON object is an invalid response"""
        transport = RecordingTransport({})
        client = create_client(transport)

        with pytest.raises(ProtocolError, match='Response from API invalid.'):
            client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

    @pytest.mark.parametrize('body', ['', 'not json', '[]', 'true', '"text"'])
    def test_unparseable_response(self, body):
        """Empty or non-object bodies are invalid responses"""
        client = create_client(RecordingTransport(body))

        with pytest.raises(ProtocolError):
            client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

    def test_connection_error(self):
        """Transport errors are raised unchanged and not retried"""
        error = TransportError(details={'reason': 'Connection error'})
        transport = RecordingTransport(error, {'valid': True})
        client = create_client(transport)

        with pytest.raises(TransportError, match='An error occurred while sending the request to mosparo.'):
            client.verify_submission(FORM_DATA, SUBMIT_TOKEN, VALIDATION_TOKEN)

        assert len(transport.requests) == 1


class TestStatistics:
    """Test statistic requests"""

    def test_get_statistic_by_date(self):
        """Statistics are parsed from the data field"""
        transport = RecordingTransport({
            'data': {
                'numberOfValidSubmissions': 10,
                'numberOfSpamSubmissions': 5,
                'numbersByDate': {'2024-01-01': {'numberOfValidSubmissions': 10, 'numberOfSpamSubmissions': 5}},
            }
        })
        client = create_client(transport)

        result = client.get_statistic_by_date()

        assert isinstance(result, StatisticResult)
        assert result.number_of_valid_submissions == 10
        assert result.number_of_spam_submissions == 5
        assert '2024-01-01' in result.numbers_by_date

        request = transport.requests[0]
        assert request.method == 'GET'
        assert request.path == STATISTIC_BY_DATE_ENDPOINT
        assert request.query == {}
        assert request.body is None
        assert request.request_signature == hmac_sha256_hex(STATISTIC_BY_DATE_ENDPOINT + '{}', PRIVATE_KEY)

    def test_query_parameters(self):
        """Range and start date are signed and sent"""
        transport = RecordingTransport({'data': {'numberOfValidSubmissions': 0, 'numberOfSpamSubmissions': 0, 'numbersByDate': []}})
        client = create_client(transport)

        result = client.get_statistic_by_date(3600, date(2024, 1, 31))

        request = transport.requests[0]
        assert request.query == {'range': 3600, 'startDate': '2024-01-31'}
        assert request.request_signature == hmac_sha256_hex(
            STATISTIC_BY_DATE_ENDPOINT + '{"range":3600,"startDate":"2024-01-31"}',
            PRIVATE_KEY
        )
        assert result.numbers_by_date == {}

    def test_service_error(self):
        """Error payloads are raised as service errors"""
        transport = RecordingTransport({
            'error': True,
            'errorMessage': 'Request not valid',
            'debugInformation': {'reason': 'signature'},
        })
        client = create_client(transport)

        with pytest.raises(ServiceError, match='Request not valid') as exc_info:
            client.get_statistic_by_date()

        assert exc_info.value.error_message == 'Request not valid'
        assert exc_info.value.debug_information == {'reason': 'signature'}

    def test_missing_data(self):
        """A response without data is invalid"""
        client = create_client(RecordingTransport({'result': True}))

        with pytest.raises(ProtocolError):
            client.get_statistic_by_date()


class TestRulePackage:
    """Test rule package import"""

    def test_store_rule_package(self):
        """The import body is signed and the result parsed"""
        transport = RecordingTransport({'successful': True, 'verifiedHash': True})
        client = create_client(transport)

        content = '{"rules": [], "url": "https://example.com/rules"}'
        result = client.store_rule_package(1, content, 'abc123')

        assert isinstance(result, RulePackageImportResult)
        assert result.is_successful()
        assert result.is_hash_validated()

        request = transport.requests[0]
        assert request.method == 'POST'
        assert request.path == RULE_PACKAGE_IMPORT_ENDPOINT
        assert request.body == {
            'rulePackageId': 1,
            'rulePackageContent': content,
            'rulePackageHash': 'abc123',
        }
        assert request.request_signature == hmac_sha256_hex(
            RULE_PACKAGE_IMPORT_ENDPOINT + to_json(request.body),
            PRIVATE_KEY
        )

    def test_store_rule_package_error(self):
        """Error payloads are raised as service errors"""
        client = create_client(RecordingTransport({'error': True, 'errorMessage': 'Rule package not found.'}))

        with pytest.raises(ServiceError, match='Rule package not found.'):
            client.store_rule_package(99, '{}', 'hash')


class TestClientConstruction:
    """Test client creation"""

    def test_from_config(self):
        """The client takes keys and host from the configuration"""
        config = ClientConfig(host='http://test.local', public_key=PUBLIC_KEY, private_key=PRIVATE_KEY)
        transport = RecordingTransport()

        client = MosparoClient.from_config(config, transport=transport)

        assert client.host == 'http://test.local'
        assert client.public_key == PUBLIC_KEY
        assert PRIVATE_KEY not in repr(client)

    def test_default_transport(self):
        """Without a transport the requests based one is used"""
        from mosparo_sdk.transport import RequestsTransport

        client = MosparoClient('http://test.local', PUBLIC_KEY, PRIVATE_KEY, {'timeout': 5})

        assert isinstance(client._transport, RequestsTransport)
        assert client._transport.timeout == 5
