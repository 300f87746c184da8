"""Main conversion orchestration — convert(), indexing, infrastructure lookup."""

import fnmatch

from capi2mapi.pacts.helpers import nested, object_name
from capi2mapi.pacts.types import ConvertContext
from capi2mapi.core.assemble import MachineAndInfrastructureMachine, MachineSetAndMachineTemplate
from capi2mapi.core.constants import (
    CAPI_CLUSTER_KIND, CAPI_MACHINE_KIND, CAPI_MACHINE_SET_KIND, IGNORED_KINDS, MAPI_NAMESPACE,
)
from capi2mapi.core.powervs import POWERVS

# Platform converters used by convert(), keyed by the kinds they consume
_PLATFORMS = [POWERVS]
_BY_MACHINE_KIND = {p.infra_machine_kind: p for p in _PLATFORMS}
_BY_TEMPLATE_KIND = {p.infra_template_kind: p for p in _PLATFORMS}

# All kinds the pipeline reads
KNOWN_KINDS = (
    {CAPI_MACHINE_KIND, CAPI_MACHINE_SET_KIND, CAPI_CLUSTER_KIND}
    | {k for p in _PLATFORMS
       for k in (p.infra_machine_kind, p.infra_template_kind, p.infra_cluster_kind)}
)


def _is_excluded(name: str, exclude_list: list[str]) -> bool:
    """Check if an object name matches any exclude pattern (supports wildcards)."""
    return any(fnmatch.fnmatch(name, pattern) for pattern in exclude_list)


def _by_name(items: list[dict]) -> dict[str, dict]:
    return {m["metadata"]["name"]: m for m in items
            if "name" in (m.get("metadata") or {})}


def _index_manifests(manifests: dict, ctx: ConvertContext) -> None:
    """Index CAPI and infrastructure objects by name for quick lookup."""
    ctx.machines = _by_name(manifests.get(CAPI_MACHINE_KIND, []))
    ctx.machine_sets = _by_name(manifests.get(CAPI_MACHINE_SET_KIND, []))
    ctx.clusters = _by_name(manifests.get(CAPI_CLUSTER_KIND, []))
    for platform in _PLATFORMS:
        for kind in (platform.infra_machine_kind, platform.infra_template_kind,
                     platform.infra_cluster_kind):
            ctx.infra[kind] = _by_name(manifests.get(kind, []))


def _find_infra_cluster(cluster_name: str, platform, ctx: ConvertContext) -> dict | None:
    """Resolve the infrastructure cluster via the CAPI Cluster, else by the same name."""
    infra_clusters = ctx.infra.get(platform.infra_cluster_kind, {})
    cluster = ctx.clusters.get(cluster_name)
    ref = nested(cluster, "spec", "infrastructureRef") or {}
    if ref.get("kind") == platform.infra_cluster_kind and ref.get("name") in infra_clusters:
        return infra_clusters[ref["name"]]
    return infra_clusters.get(cluster_name)


def _resolve(obj: dict, ref: dict, by_kind: dict, ctx: ConvertContext):
    """Find the platform and infra object an infrastructureRef points at."""
    full = object_name(obj)
    kind = ref.get("kind", "")
    platform = by_kind.get(kind)
    if platform is None:
        ctx.warnings.append(f"{full}: infrastructure kind '{kind or '?'}' not supported, skipped")
        return None, None, None
    infra_obj = ctx.infra.get(kind, {}).get(ref.get("name", ""))
    if infra_obj is None:
        ctx.warnings.append(f"{full}: {kind} '{ref.get('name', '?')}' not found, skipped")
        return None, None, None
    cluster_name = nested(obj, "spec", "clusterName", default="")
    infra_cluster = _find_infra_cluster(cluster_name, platform, ctx)
    if infra_cluster is None:
        ctx.warnings.append(
            f"{full}: {platform.infra_cluster_kind} for cluster '{cluster_name}' not found, skipped")
        return None, None, None
    return platform, infra_obj, infra_cluster


def _convert_machines(ctx: ConvertContext, exclude: list[str]) -> list[dict]:
    converted = []
    for name, machine in ctx.machines.items():
        if _is_excluded(name, exclude):
            continue
        ref = nested(machine, "spec", "infrastructureRef") or {}
        platform, infra_machine, infra_cluster = _resolve(machine, ref, _BY_MACHINE_KIND, ctx)
        if platform is None:
            continue
        result, warnings, err = MachineAndInfrastructureMachine(
            platform, machine, infra_machine, infra_cluster, ctx.namespace).to_machine()
        ctx.warnings.extend(warnings)
        if err is not None:
            ctx.failures.append((object_name(machine), err))
            continue
        converted.append(result)
    return converted


def _convert_machine_sets(ctx: ConvertContext, exclude: list[str]) -> list[dict]:
    converted = []
    for name, machine_set in ctx.machine_sets.items():
        if _is_excluded(name, exclude):
            continue
        ref = nested(machine_set, "spec", "template", "spec", "infrastructureRef") or {}
        platform, template, infra_cluster = _resolve(machine_set, ref, _BY_TEMPLATE_KIND, ctx)
        if platform is None:
            continue
        result, warnings, err = MachineSetAndMachineTemplate(
            platform, machine_set, template, infra_cluster, ctx.namespace).to_machine_set()
        ctx.warnings.extend(warnings)
        if err is not None:
            ctx.failures.append((object_name(machine_set), err))
            continue
        converted.append(result)
    return converted


def _emit_kind_warnings(manifests: dict, warnings: list[str]) -> None:
    """Emit warnings for kinds the pipeline does not read."""
    known = KNOWN_KINDS | set(IGNORED_KINDS)
    for kind, items in manifests.items():
        if kind not in known:
            warnings.append(f"unknown kind '{kind}' ({len(items)} manifest(s)), skipped")


def convert(manifests: dict[str, list[dict]],
            config: dict) -> tuple[list[dict], list[str], list[tuple[str, Exception]]]:
    """Main conversion: returns (mapi_objects, warnings, failures)."""
    ctx = ConvertContext(config=config, namespace=config.get("namespace") or MAPI_NAMESPACE)
    _index_manifests(manifests, ctx)
    exclude = config.get("exclude", [])

    converted = _convert_machine_sets(ctx, exclude)
    converted.extend(_convert_machines(ctx, exclude))

    _emit_kind_warnings(manifests, ctx.warnings)
    return converted, ctx.warnings, ctx.failures
