"""Adapters for the port interfaces."""
