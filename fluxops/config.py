"""Global configuration: repository layout, commit messages, retry defaults."""

# Bounded retry applied to every network-facing call
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY_SECONDS = 5.0

DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH = "main"
DEFAULT_SYSTEM_NAMESPACE = "flux-system"

# Directory and file names inside the configuration repository
EKSA_SYSTEM_DIR = "eksa-system"
KUSTOMIZE_FILE_NAME = "kustomization.yaml"
CLUSTER_CONFIG_FILE_NAME = "eksa-cluster.yaml"
FLUX_SYNC_FILE_NAME = "gotk-sync.yaml"
FLUX_PATCH_FILE_NAME = "gotk-patches.yaml"
GENERATED_DIR = "generated"

# Commit messages are part of the repository audit trail; do not reword.
INITIAL_COMMIT_MESSAGE = "Initial commit of cluster configuration; generated by EKS-A CLI"
UPDATE_COMMIT_MESSAGE = "Update commit of cluster configuration; generated by EKS-A CLI"
DELETE_COMMIT_MESSAGE = "Delete commit of cluster configuration; generated by EKS-A CLI"
SEED_COMMIT_MESSAGE = "initializing repository"

REPOSITORY_DESCRIPTION = "EKS-A cluster configuration repository"

# Resource API groups used when marshalling the cluster spec
EKSA_API_VERSION = "anywhere.eks.amazonaws.com/v1alpha1"
