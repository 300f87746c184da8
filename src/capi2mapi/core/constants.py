"""Kinds, API groups, and well-known label/annotation keys."""

MAPI_API_VERSION = "machine.openshift.io/v1beta1"
MAPI_NAMESPACE = "openshift-machine-api"

CAPI_MACHINE_KIND = "Machine"
CAPI_MACHINE_SET_KIND = "MachineSet"
CAPI_CLUSTER_KIND = "Cluster"

# CAPI expresses lifecycle hooks as annotations: <prefix>/<hook name>: <owner>
CAPI_PRE_DRAIN_HOOK_PREFIX = "pre-drain.delete.hook.machine.cluster.x-k8s.io"
CAPI_PRE_TERMINATE_HOOK_PREFIX = "pre-terminate.delete.hook.machine.cluster.x-k8s.io"

# MachineSet delete policies, spelled identically by both APIs
DELETE_POLICIES = ("Random", "Newest", "Oldest")

# CAPI Machine spec fields with no MAPI counterpart; dropped with a warning
DROPPED_MACHINE_FIELDS = (
    "version", "failureDomain", "nodeDrainTimeout",
    "nodeVolumeDetachTimeout", "nodeDeletionTimeout",
)

# Kinds silently ignored when scanning a manifest set
IGNORED_KINDS = (
    "KubeadmConfig", "KubeadmConfigTemplate", "KubeadmControlPlane",
    "MachineDeployment", "MachineHealthCheck", "Secret", "ConfigMap",
    "Namespace",
)
