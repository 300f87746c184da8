"""Platform-agnostic Machine/MachineSet conversion — metadata, lifecycle hooks, set fields."""

import copy

from capi2mapi.pacts.errors import FieldPath, not_supported
from capi2mapi.pacts.helpers import copy_string_map, object_name
from capi2mapi.core.constants import (
    CAPI_PRE_DRAIN_HOOK_PREFIX, CAPI_PRE_TERMINATE_HOOK_PREFIX, DELETE_POLICIES,
    DROPPED_MACHINE_FIELDS, MAPI_API_VERSION, MAPI_NAMESPACE,
)

_HOOK_PREFIXES = {
    CAPI_PRE_DRAIN_HOOK_PREFIX: "preDrain",
    CAPI_PRE_TERMINATE_HOOK_PREFIX: "preTerminate",
}


def _split_lifecycle_hooks(annotations: dict | None) -> tuple[dict | None, dict]:
    """Separate CAPI lifecycle-hook annotations from ordinary annotations."""
    if annotations is None:
        return None, {}
    plain: dict = {}
    hooks: dict[str, list[dict]] = {}
    for key, value in annotations.items():
        prefix, _, hook_name = key.partition("/")
        if prefix in _HOOK_PREFIXES and hook_name:
            hooks.setdefault(_HOOK_PREFIXES[prefix], []).append(
                {"name": hook_name, "owner": value})
        else:
            plain[key] = value
    for entries in hooks.values():
        entries.sort(key=lambda h: h["name"])
    return plain, hooks


def _convert_object_meta(meta: dict | None, namespace: str):
    meta = meta or {}
    annotations, hooks = _split_lifecycle_hooks(meta.get("annotations"))
    out: dict = {"name": meta.get("name", ""), "namespace": namespace}
    labels = copy_string_map(meta.get("labels"))
    if labels is not None:
        out["labels"] = labels
    if annotations is not None:
        out["annotations"] = annotations
    return out, hooks


def from_capi_machine_to_mapi_machine(capi_machine: dict,
                                      namespace: str = MAPI_NAMESPACE):
    """Build the MAPI Machine skeleton; the provider spec slot is left empty.

    Returns (machine, warnings, field_errors).
    """
    warnings: list[str] = []
    errors = []
    spec = capi_machine.get("spec") or {}
    fld_path = FieldPath("spec")
    full = object_name(capi_machine)

    metadata, hooks = _convert_object_meta(capi_machine.get("metadata"), namespace)
    mapi_spec: dict = {}
    if hooks:
        mapi_spec["lifecycleHooks"] = hooks
    if spec.get("providerID"):
        mapi_spec["providerID"] = spec["providerID"]
    mapi_spec["providerSpec"] = {}

    bootstrap = spec.get("bootstrap") or {}
    if bootstrap.get("configRef"):
        if bootstrap.get("dataSecretName"):
            warnings.append(f"{full}: spec.bootstrap.configRef ignored, "
                            f"MAPI only consumes the data secret")
        else:
            errors.append(not_supported(
                fld_path.child("bootstrap", "configRef"), bootstrap["configRef"],
                "bootstrap configRef is not supported, set dataSecretName instead"))

    for name in DROPPED_MACHINE_FIELDS:
        if spec.get(name):
            warnings.append(f"{full}: spec.{name} is not supported by MAPI, dropped")

    machine = {
        "apiVersion": MAPI_API_VERSION,
        "kind": "Machine",
        "metadata": metadata,
        "spec": mapi_spec,
    }
    return machine, warnings, errors


def _convert_selector(selector: dict | None) -> dict:
    selector = selector or {}
    out: dict = {}
    if "matchLabels" in selector:
        out["matchLabels"] = copy_string_map(selector["matchLabels"]) or {}
    if selector.get("matchExpressions"):
        out["matchExpressions"] = copy.deepcopy(selector["matchExpressions"])
    return out


def from_capi_machine_set_to_mapi_machine_set(capi_machine_set: dict,
                                              namespace: str = MAPI_NAMESPACE):
    """Build the MAPI MachineSet skeleton; the template spec is filled by the caller.

    Returns (machine_set, warnings, field_errors).
    """
    warnings: list[str] = []
    errors = []
    spec = capi_machine_set.get("spec") or {}
    fld_path = FieldPath("spec")

    metadata, _ = _convert_object_meta(capi_machine_set.get("metadata"), namespace)
    mapi_spec: dict = {}
    if spec.get("replicas") is not None:
        mapi_spec["replicas"] = spec["replicas"]
    if spec.get("minReadySeconds"):
        mapi_spec["minReadySeconds"] = spec["minReadySeconds"]
    delete_policy = spec.get("deletePolicy")
    if delete_policy:
        if delete_policy in DELETE_POLICIES:
            mapi_spec["deletePolicy"] = delete_policy
        else:
            errors.append(not_supported(fld_path.child("deletePolicy"), delete_policy,
                                        f"supported values: {', '.join(DELETE_POLICIES)}"))
    mapi_spec["selector"] = _convert_selector(spec.get("selector"))
    mapi_spec["template"] = {"metadata": {}, "spec": {}}

    machine_set = {
        "apiVersion": MAPI_API_VERSION,
        "kind": "MachineSet",
        "metadata": metadata,
        "spec": mapi_spec,
    }
    return machine_set, warnings, errors
