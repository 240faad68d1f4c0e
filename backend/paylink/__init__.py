"""
PURPOSE: GH Paylink payment relay.

Forwards frontend payment requests to Flutterwave and ingests the gateway's
webhook notifications into the transactions store.
"""
