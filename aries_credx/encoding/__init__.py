"""Encode attribute values as cryptographic integers."""
