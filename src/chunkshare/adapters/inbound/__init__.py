"""Inbound adapters for chunkshare.

Provides the REST service exposing the storage gateway operation set.
"""

from chunkshare.adapters.inbound.rest_api import PRINCIPAL_HEADER, create_app

__all__ = ["PRINCIPAL_HEADER", "create_app"]
