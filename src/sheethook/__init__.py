"""
Sheet Webhook Relay.

Relays change notifications from a spreadsheet to a single HTTP
endpoint as signed, canonical JSON payloads, one at a time and in
arrival order.
"""

__version__ = "0.3.0"
