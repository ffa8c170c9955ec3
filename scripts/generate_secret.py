#!/usr/bin/env python3
"""
Script: generate_secret.py
Description: Generate a shared secret for webhook signatures.

Prints a random secret suitable for WEBHOOK_SECRET. Configure the same
value on the receiving endpoint so it can verify X-Webhook-Signature.

Usage:
    python scripts/generate_secret.py [--bytes 32]
"""

import argparse
import secrets
import sys


def generate_secret(num_bytes: int = 32) -> str:
    """
    Generate a random hex secret.

    Args:
        num_bytes: Bytes of randomness (the hex string is twice as long)

    Returns:
        Lowercase hex secret
    """
    if num_bytes < 16:
        raise ValueError("num_bytes must be at least 16")
    return secrets.token_hex(num_bytes)


def main():
    """Main script execution."""
    parser = argparse.ArgumentParser(
        description="Generate a webhook signing secret",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/generate_secret.py
  python scripts/generate_secret.py --bytes 64 >> .env

Security Warning:
  Anyone holding the secret can forge signed payloads.
        """
    )
    parser.add_argument(
        '--bytes',
        type=int,
        default=32,
        help='Bytes of randomness (default: 32)'
    )
    args = parser.parse_args()

    try:
        secret = generate_secret(args.bytes)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"WEBHOOK_SECRET={secret}")


if __name__ == "__main__":
    main()
