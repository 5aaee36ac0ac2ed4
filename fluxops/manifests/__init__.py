"""Manifest rendering for the GitOps configuration repository."""

from fluxops.manifests.generator import ManifestGenerator
from fluxops.manifests.marshaller import marshal_cluster_spec

__all__ = ["ManifestGenerator", "marshal_cluster_spec"]
