"""
Command-line interface for mosparo Python SDK
Verify submissions, read statistics and import rule packages from the shell
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from .client import MosparoClient
from .config import ClientConfig
from .exceptions import MosparoSDKError, ServiceError, TransportError
from .signing import RequestHelper

EXIT_OK = 0
EXIT_NOT_SUBMITTABLE = 1
EXIT_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='mosparo-cli',
        description='mosparo SDK command-line interface for submission verification'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'mosparo Python SDK {__version__}'
    )
    parser.add_argument('--config', help='JSON configuration file')
    parser.add_argument('--host', help='Host of the mosparo installation (env: MOSPARO_HOST)')
    parser.add_argument('--public-key', help='Public key of the project (env: MOSPARO_PUBLIC_KEY)')
    parser.add_argument('--private-key', help='Private key of the project (env: MOSPARO_PRIVATE_KEY)')
    parser.add_argument('--timeout', type=float, help='Request timeout in seconds')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='Increase log output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    verify_parser = subparsers.add_parser('verify', help='Verify a form submission')
    verify_parser.add_argument('--form-data', required=True, help='Form data as JSON or @file')
    verify_parser.add_argument('--submit-token', help='Submit token (default: read from form data)')
    verify_parser.add_argument('--validation-token', help='Validation token (default: read from form data)')

    statistics_parser = subparsers.add_parser('statistics', help='Show submission statistics')
    statistics_parser.add_argument('--range', type=int, default=0, help='Time range in seconds')
    statistics_parser.add_argument('--start-date', help='First day (YYYY-MM-DD)')

    import_parser = subparsers.add_parser('import-rule-package', help='Import a rule package')
    import_parser.add_argument('--id', required=True, help='Rule package ID')
    import_parser.add_argument('--content-file', required=True, help='File with the rule package content')
    import_parser.add_argument('--hash', required=True, help='SHA-256 hash of the content')

    sign_parser = subparsers.add_parser('sign-form', help='Print prepared form data and form signature')
    sign_parser.add_argument('--form-data', required=True, help='Form data as JSON or @file')

    return parser


def configure_logging(verbosity: int) -> None:
    """Configure root logging for the given verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr
    )


def load_config(args) -> ClientConfig:
    """Build the client configuration from file, environment and arguments."""
    if args.config:
        values: Dict[str, Any] = asdict(ClientConfig.from_file(args.config))
    else:
        values = {
            'host': os.environ.get('MOSPARO_HOST', ''),
            'public_key': os.environ.get('MOSPARO_PUBLIC_KEY', ''),
            'private_key': os.environ.get('MOSPARO_PRIVATE_KEY', ''),
        }

    overrides = {
        'host': args.host,
        'public_key': args.public_key,
        'private_key': args.private_key,
        'timeout': args.timeout,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    return ClientConfig.from_dict(values)


def read_form_data(value: str) -> Dict[str, Any]:
    """Parse form data given as JSON text or as ``@path`` to a JSON file."""
    if value.startswith('@'):
        value = Path(value[1:]).read_text(encoding='utf-8')

    data = json.loads(value)
    if not isinstance(data, dict):
        raise ValueError("Form data must be a JSON object")
    return data


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def handle_verify_command(args) -> int:
    """Handle submission verification."""
    client = MosparoClient.from_config(load_config(args))
    form_data = read_form_data(args.form_data)

    result = client.verify_submission(form_data, args.submit_token, args.validation_token)
    print_json(result.to_dict())

    return EXIT_OK if result.submittable else EXIT_NOT_SUBMITTABLE


def handle_statistics_command(args) -> int:
    """Handle statistics retrieval."""
    client = MosparoClient.from_config(load_config(args))

    result = client.get_statistic_by_date(args.range, args.start_date)
    print_json(result.to_dict())
    return EXIT_OK


def handle_import_command(args) -> int:
    """Handle rule package import."""
    client = MosparoClient.from_config(load_config(args))
    content = Path(args.content_file).read_text(encoding='utf-8')

    result = client.store_rule_package(args.id, content, args.hash)
    print_json(result.to_dict())
    return EXIT_OK if result.successful else EXIT_ERROR


def handle_sign_form_command(args) -> int:
    """Handle offline form signing."""
    config = load_config(args)
    helper = RequestHelper(config.public_key, config.private_key)

    prepared = helper.prepare_form_data(read_form_data(args.form_data))
    print_json({
        'form_data': prepared,
        'form_signature': helper.create_form_data_hmac_hash(prepared),
    })
    return EXIT_OK


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 success, 1 not submittable, 2 error)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    handlers = {
        'verify': handle_verify_command,
        'statistics': handle_statistics_command,
        'import-rule-package': handle_import_command,
        'sign-form': handle_sign_form_command,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return EXIT_ERROR

    try:
        return handler(args)
    except ServiceError as e:
        print(f"mosparo reported an error: {e.error_message}", file=sys.stderr)
        return EXIT_ERROR
    except TransportError as e:
        print(f"Server communication error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except MosparoSDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
