"""
mosparo Python SDK
Verify form submissions with the mosparo spam protection service
"""

from .version import __version__
from .client import (
    MosparoClient,
    STATISTIC_BY_DATE_ENDPOINT,
    RULE_PACKAGE_IMPORT_ENDPOINT,
)
from .config import ClientConfig
from .exceptions import (
    MosparoSDKError,
    ConfigurationError,
    ValidationError,
    TransportError,
    ProtocolError,
    ServiceError,
)
from .results import (
    FieldStatus,
    VerificationResult,
    StatisticResult,
    RulePackageImportResult,
)
from .signing import (
    RequestHelper,
    SignatureSet,
    VERIFICATION_ENDPOINT,
    cleanup_form_data,
    prepare_form_data,
    to_json,
    sha256_hex,
    hmac_sha256_hex,
)
from .transport import (
    SignedRequest,
    Transport,
    RequestsTransport,
)


def create_client(
    host: str,
    public_key: str,
    private_key: str,
    timeout: float = 30.0,
    verify_ssl: bool = True
) -> MosparoClient:
    """
    Create mosparo client with default transport configuration.
    
    Args:
        host: Host of the mosparo installation
        public_key: Public key of the mosparo project
        private_key: Private key of the mosparo project
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify SSL certificates
        
    Returns:
        MosparoClient: Configured client
    """
    config = ClientConfig(
        host=host,
        public_key=public_key,
        private_key=private_key,
        timeout=timeout,
        verify_ssl=verify_ssl
    )
    return MosparoClient.from_config(config)


# Public API exports
__all__ = [
    '__version__',
    # Client
    'MosparoClient',
    'create_client',
    'ClientConfig',
    'VERIFICATION_ENDPOINT',
    'STATISTIC_BY_DATE_ENDPOINT',
    'RULE_PACKAGE_IMPORT_ENDPOINT',
    # Exceptions
    'MosparoSDKError',
    'ConfigurationError',
    'ValidationError',
    'TransportError',
    'ProtocolError',
    'ServiceError',
    # Results
    'FieldStatus',
    'VerificationResult',
    'StatisticResult',
    'RulePackageImportResult',
    # Signing
    'RequestHelper',
    'SignatureSet',
    'cleanup_form_data',
    'prepare_form_data',
    'to_json',
    'sha256_hex',
    'hmac_sha256_hex',
    # Transport
    'SignedRequest',
    'Transport',
    'RequestsTransport',
]
