"""
Signalforge Runtime - container runtime control engine

Talks to the local container daemon, normalizes its data model into stable
view objects, derives CPU/memory/network figures from raw counter snapshots,
and infers a connectivity graph between the containers of the local stack.
"""

__version__ = "0.1.0"
__author__ = "Signalforge"
