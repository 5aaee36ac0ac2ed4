"""ManifestGenerator — write the eksa-system and flux-system manifest sets.

Layout inside the configuration repository::

    {path}/{cluster}/eksa-system/
        eksa-cluster.yaml
        kustomization.yaml
    {path}/{namespace}/              (self-managed clusters only)
        kustomization.yaml
        gotk-sync.yaml
        gotk-patches.yaml
"""

from __future__ import annotations

import logging

from fluxops.config import (
    CLUSTER_CONFIG_FILE_NAME,
    FLUX_PATCH_FILE_NAME,
    FLUX_SYNC_FILE_NAME,
    KUSTOMIZE_FILE_NAME,
)
from fluxops.errors import ManifestGenerationError
from fluxops.filewriter import FileWriter
from fluxops.manifests import templates
from fluxops.manifests.marshaller import marshal_cluster_spec
from fluxops.models.context import OperationContext
from fluxops.templater import Templater


class ManifestGenerator:
    """Generate cluster and toolkit manifests through *writer*.

    Parameters
    ----------
    writer:
        Writer rooted at the repository working directory.
    logger:
        Optional logger; defaults to the module logger.
    """

    def __init__(self, writer: FileWriter, logger: logging.Logger | None = None) -> None:
        self.writer = writer
        self.log = logger or logging.getLogger(__name__)

    def _scoped_writer(self, sub_dir: str) -> FileWriter:
        try:
            w = self.writer.with_dir(sub_dir)
        except OSError as exc:
            raise ManifestGenerationError(f"creating {sub_dir} directory: {exc}") from exc
        w.clean_up_temp()
        return w

    def write_eksa_system_files(self, op: OperationContext) -> None:
        """Write the cluster config and its kustomization.

        Does nothing when the operation carries no datacenter or machine
        configs, since there is no cluster configuration to render.
        """
        if not op.has_manifest_payload:
            return

        self.log.debug("Generating eks-a cluster manifest files...")
        w = self._scoped_writer(op.eksa_system_dir)

        content = marshal_cluster_spec(op.cluster_spec, op.datacenter_config, op.machine_configs)
        try:
            w.write(CLUSTER_CONFIG_FILE_NAME, content)
        except OSError as exc:
            raise ManifestGenerationError(
                f"writing eks-a cluster config file into {w.dir}: {exc}"
            ) from exc

        Templater(w).write_to_file(
            templates.EKSA_KUSTOMIZATION,
            {"ConfigFileName": CLUSTER_CONFIG_FILE_NAME},
            KUSTOMIZE_FILE_NAME,
        )

    def write_flux_system_files(self, op: OperationContext) -> None:
        """Write the toolkit kustomization, sync and image patch manifests."""
        self.log.debug("Generating flux custom manifest files...")
        w = self._scoped_writer(op.flux_system_dir)
        t = Templater(w)

        t.write_to_file(templates.FLUX_KUSTOMIZATION, {"Namespace": op.namespace}, KUSTOMIZE_FILE_NAME)
        t.write_to_file(templates.FLUX_SYNC, None, FLUX_SYNC_FILE_NAME)

        images = op.cluster_spec.flux_images
        t.write_to_file(
            templates.FLUX_PATCHES,
            {
                "Namespace": op.namespace,
                "SourceControllerImage": images.source_controller,
                "KustomizeControllerImage": images.kustomize_controller,
                "HelmControllerImage": images.helm_controller,
                "NotificationControllerImage": images.notification_controller,
            },
            FLUX_PATCH_FILE_NAME,
        )
