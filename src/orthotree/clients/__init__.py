"""
API clients for external services.

Provides a client for the Alliance of Genome Resources REST API.
"""

from orthotree.clients.alliance import AllianceAPIError, AllianceClient, AllianceGene

__all__ = [
    "AllianceAPIError",
    "AllianceClient",
    "AllianceGene",
]
