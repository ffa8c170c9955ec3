#!/usr/bin/env python3
"""
Script: sign_payload.py
Description: Print the canonical body and signature of a payload.

Reads a JSON object from a file (or stdin), encodes it exactly as the
relay would and prints the body and its X-Webhook-Signature. Useful
when debugging signature checks on a receiving endpoint.

Usage:
    python scripts/sign_payload.py payload.json --secret "$WEBHOOK_SECRET"
    cat payload.json | python scripts/sign_payload.py - --secret s3cret
"""

import argparse
import json
import sys

from sheethook.delivery.encoding import encode
from sheethook.delivery.signing import SIGNATURE_HEADER, sign
from sheethook.errors import ConfigurationError


def main():
    """Main script execution."""
    parser = argparse.ArgumentParser(
        description="Print the canonical body and signature for a JSON payload"
    )
    parser.add_argument(
        'path',
        help="JSON file holding one object, or '-' for stdin"
    )
    parser.add_argument(
        '--secret',
        required=True,
        help='Shared signing secret'
    )
    args = parser.parse_args()

    try:
        if args.path == '-':
            data = json.load(sys.stdin)
        else:
            with open(args.path, encoding='utf-8') as handle:
                data = json.load(handle)
    except (OSError, ValueError) as e:
        print(f"ERROR: cannot read payload: {e}", file=sys.stderr)
        sys.exit(1)

    if not isinstance(data, dict):
        print("ERROR: payload must be a JSON object", file=sys.stderr)
        sys.exit(1)

    try:
        body = encode(data)
        signature = sign(body, args.secret)
    except (ConfigurationError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print(body.decode('ascii'))
    print(f"{SIGNATURE_HEADER}: {signature}")


if __name__ == "__main__":
    main()
