"""
Exception classes for mosparo Python SDK
"""

from typing import Optional, Dict, Any


class MosparoSDKError(Exception):
    """Base exception for all mosparo SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(MosparoSDKError):
    """Exception raised when the submit or validation token is not available"""
    
    def __init__(self, message: str = "Submit or validation token not available.",
                 error_code: str = "TOKENS_MISSING", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ValidationError(MosparoSDKError):
    """Exception raised for invalid client configuration"""
    pass


class TransportError(MosparoSDKError):
    """Exception raised when the request to mosparo could not be sent"""
    
    def __init__(self, message: str = "An error occurred while sending the request to mosparo.",
                 error_code: str = "TRANSPORT_ERROR", http_status: int = 0,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class ProtocolError(MosparoSDKError):
    """Exception raised for an empty or unparseable API response"""
    
    def __init__(self, message: str = "Response from API invalid.",
                 error_code: str = "INVALID_RESPONSE", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ServiceError(MosparoSDKError):
    """Exception raised when mosparo answered with an error payload"""
    
    def __init__(self, error_message: str, debug_information: Optional[Dict[str, Any]] = None):
        super().__init__(error_message, "SERVICE_ERROR", {'debug_information': debug_information})
        self.error_message = error_message
        self.debug_information = debug_information
