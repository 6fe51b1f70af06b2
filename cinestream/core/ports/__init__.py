"""Interfaces (ports) implementees par les adaptateurs."""

from cinestream.core.ports.api_clients import IFederatedBackend, IMediaAPIClient

__all__ = ["IFederatedBackend", "IMediaAPIClient"]
