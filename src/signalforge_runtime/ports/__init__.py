"""Ports: inbound operation contracts and outbound daemon interface."""
