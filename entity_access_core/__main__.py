"""
Operator command line for Entity Access Core.

Examples:
  # Print a new base64 encryption key for ENCRYPTION_KEY
  python -m entity_access_core generate-key

  # Check that the configured ENCRYPTION_KEY decodes to a valid key
  python -m entity_access_core check-key
"""

import argparse
import sys
from typing import List, Optional

from .config import get_config
from .exceptions import BaseError
from .utils.encryption_utils import generate_key, key_material


def cmd_generate_key(args: argparse.Namespace) -> int:
    print(generate_key())
    return 0


def cmd_check_key(args: argparse.Namespace) -> int:
    try:
        with key_material(get_config().security.require_encryption_key()):
            pass
    except BaseError as e:
        print(f"Invalid encryption key: {e.message}", file=sys.stderr)
        return 1
    print("Encryption key OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="entity_access_core",
        description="Key provisioning helpers for credential encryption",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    generate = subparsers.add_parser("generate-key", help="Print a new base64 32-byte key")
    generate.set_defaults(handler=cmd_generate_key)

    check = subparsers.add_parser("check-key", help="Validate the ENCRYPTION_KEY setting")
    check.set_defaults(handler=cmd_check_key)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
