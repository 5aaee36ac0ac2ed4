"""Manifest templates committed to the configuration repository.

Placeholders use :class:`string.Template` syntax (``${Name}``).
"""

EKSA_KUSTOMIZATION = """\
apiVersion: kustomize.config.k8s.io/v1beta1
kind: Kustomization
resources:
- ${ConfigFileName}
"""

FLUX_KUSTOMIZATION = """\
apiVersion: kustomize.config.k8s.io/v1beta1
kind: Kustomization
namespace: ${Namespace}
resources:
- gotk-components.yaml
- gotk-sync.yaml
patchesStrategicMerge:
- gotk-patches.yaml
"""

# Placeholder; `flux bootstrap` overwrites this file with the real sync objects.
FLUX_SYNC = """\
# This manifest was generated by flux bootstrap. DO NOT EDIT.
"""

FLUX_PATCHES = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: source-controller
  namespace: ${Namespace}
spec:
  template:
    spec:
      containers:
      - image: ${SourceControllerImage}
        name: manager
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: kustomize-controller
  namespace: ${Namespace}
spec:
  template:
    spec:
      containers:
      - image: ${KustomizeControllerImage}
        name: manager
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: helm-controller
  namespace: ${Namespace}
spec:
  template:
    spec:
      containers:
      - image: ${HelmControllerImage}
        name: manager
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: notification-controller
  namespace: ${Namespace}
spec:
  template:
    spec:
      containers:
      - image: ${NotificationControllerImage}
        name: manager
"""
