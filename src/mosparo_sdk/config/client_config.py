"""
Client configuration for the mosparo Python SDK

Provides the connection settings of a mosparo project and loaders for
JSON strings, JSON files and environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import ValidationError
from ..transport import DEFAULT_TIMEOUT

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValidationError(f"Invalid boolean value for {name}: {value!r}", "INVALID_FORMAT")


@dataclass
class ClientConfig:
    """Connection settings of a mosparo project."""
    host: str
    public_key: str
    private_key: str = field(repr=False)
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    proxies: Optional[Dict[str, str]] = None
    transport_options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate client configuration."""
        if not self.host:
            raise ValidationError("Host cannot be empty")

        if not self.public_key:
            raise ValidationError("Public key cannot be empty")

        if not self.private_key:
            raise ValidationError("Private key cannot be empty")

        try:
            self.timeout = float(self.timeout)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid timeout: {self.timeout!r}", "INVALID_FORMAT")

        if self.timeout <= 0:
            raise ValidationError("Timeout must be positive")

        self.verify_ssl = _parse_bool(self.verify_ssl, 'verify_ssl')

    def to_transport_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``RequestsTransport``."""
        options = dict(self.transport_options)
        options['timeout'] = self.timeout
        options['verify_ssl'] = self.verify_ssl
        if self.proxies:
            options['proxies'] = dict(self.proxies)
        return options

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClientConfig':
        """Create configuration from a dictionary with snake case or camel case keys."""
        aliases = {
            'publicKey': 'public_key',
            'privateKey': 'private_key',
            'verifySsl': 'verify_ssl',
            'transportOptions': 'transport_options',
        }
        values = {aliases.get(key, key): value for key, value in data.items()}

        unknown = set(values) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValidationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}",
                "INVALID_FORMAT"
            )

        try:
            return cls(**values)
        except TypeError as e:
            raise ValidationError(f"Invalid configuration format: {e}", "INVALID_FORMAT")

    @classmethod
    def from_json(cls, json_string: str) -> 'ClientConfig':
        """Load configuration from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")

        if not isinstance(data, dict):
            raise ValidationError("Configuration JSON must be an object", "INVALID_FORMAT")

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'ClientConfig':
        """Load configuration from file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ValidationError(f"Failed to read configuration file: {e}", "FILE_ERROR")
        return cls.from_json(json_string)

    @classmethod
    def from_env(cls, prefix: str = 'MOSPARO_', environ: Optional[Mapping[str, str]] = None) -> 'ClientConfig':
        """
        Load configuration from environment variables.

        Reads ``{prefix}HOST``, ``{prefix}PUBLIC_KEY``, ``{prefix}PRIVATE_KEY``
        and the optional ``{prefix}TIMEOUT`` and ``{prefix}VERIFY_SSL``.
        """
        env = os.environ if environ is None else environ

        values: Dict[str, Any] = {
            'host': env.get(f'{prefix}HOST', ''),
            'public_key': env.get(f'{prefix}PUBLIC_KEY', ''),
            'private_key': env.get(f'{prefix}PRIVATE_KEY', ''),
        }
        if env.get(f'{prefix}TIMEOUT'):
            values['timeout'] = env[f'{prefix}TIMEOUT']
        if env.get(f'{prefix}VERIFY_SSL'):
            values['verify_ssl'] = env[f'{prefix}VERIFY_SSL']

        return cls(**values)
