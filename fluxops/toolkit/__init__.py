"""Flux toolkit control: the client interface and its CLI backend."""

from fluxops.toolkit.client import ToolkitClient
from fluxops.toolkit.flux import FluxCli

__all__ = ["FluxCli", "ToolkitClient"]
