"""Attribute encoding for anonymous credentials."""
