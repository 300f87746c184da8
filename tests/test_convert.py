"""Tests for the manifest-set pipeline and the CLI around it."""

import pytest
import yaml

from capi2mapi.cli import load_config, main, parse_manifests, save_config
from capi2mapi.core.convert import convert

from conftest import (
    make_capi_machine, make_capi_machine_set, make_powervs_cluster, make_powervs_machine,
    make_powervs_template,
)


def _manifests(**extra):
    manifests = {
        "Machine": [make_capi_machine()],
        "IBMPowerVSMachine": [make_powervs_machine()],
        "MachineSet": [make_capi_machine_set()],
        "IBMPowerVSMachineTemplate": [make_powervs_template()],
        "IBMPowerVSCluster": [make_powervs_cluster()],
    }
    manifests.update(extra)
    return manifests


def _config(**overrides):
    cfg = {"namespace": "openshift-machine-api", "exclude": []}
    cfg.update(overrides)
    return cfg


class TestConvert:
    def test_converts_sets_then_machines(self):
        objects, warnings, failures = convert(_manifests(), _config())
        assert failures == []
        assert warnings == []
        assert [(o["kind"], o["metadata"]["name"]) for o in objects] == [
            ("MachineSet", "worker-set"), ("Machine", "worker-0")]

    def test_cluster_resolved_through_capi_cluster(self):
        cluster = {
            "kind": "Cluster",
            "metadata": {"name": "ocp"},
            "spec": {"infrastructureRef": {"kind": "IBMPowerVSCluster", "name": "ocp-pvs"}},
        }
        manifests = _manifests(Cluster=[cluster], IBMPowerVSCluster=[make_powervs_cluster("ocp-pvs")])
        objects, warnings, failures = convert(manifests, _config())
        assert failures == []
        assert len(objects) == 2

    def test_missing_infra_machine_warns(self):
        manifests = _manifests(IBMPowerVSMachine=[])
        objects, warnings, _ = convert(manifests, _config())
        assert [o["kind"] for o in objects] == ["MachineSet"]
        assert any("IBMPowerVSMachine 'worker-0' not found" in w for w in warnings)

    def test_missing_cluster_warns(self):
        objects, warnings, _ = convert(_manifests(IBMPowerVSCluster=[]), _config())
        assert objects == []
        assert len(warnings) == 2

    def test_unsupported_platform_warns(self):
        machine = make_capi_machine(name="aws-0")
        machine["spec"]["infrastructureRef"]["kind"] = "AWSMachine"
        objects, warnings, _ = convert(_manifests(Machine=[machine]), _config())
        assert any("infrastructure kind 'AWSMachine' not supported" in w for w in warnings)

    def test_failures_reported(self):
        bad = make_powervs_machine(spec={"network": {}})
        objects, _, failures = convert(_manifests(IBMPowerVSMachine=[bad]), _config())
        assert [o["kind"] for o in objects] == ["MachineSet"]
        assert [name for name, _ in failures] == ["Machine/worker-0"]
        assert len(failures[0][1].errors) == 3

    def test_exclude_patterns(self):
        objects, _, _ = convert(_manifests(), _config(exclude=["worker-*"]))
        assert objects == []

    def test_namespace_from_config(self):
        objects, _, _ = convert(_manifests(), _config(namespace="machines"))
        assert {o["metadata"]["namespace"] for o in objects} == {"machines"}

    def test_unknown_kind_warns(self):
        _, warnings, _ = convert(_manifests(Deployment=[{"kind": "Deployment"}]), _config())
        assert warnings == ["unknown kind 'Deployment' (1 manifest(s)), skipped"]


class TestConfig:
    def test_defaults(self, tmp_path):
        cfg = load_config(str(tmp_path / "capi2mapi.yaml"))
        assert cfg == {"capi2mapiVersion": "v1", "namespace": "openshift-machine-api",
                       "exclude": []}

    def test_round_trip_keeps_version_first(self, tmp_path):
        path = str(tmp_path / "capi2mapi.yaml")
        save_config(path, {"exclude": ["a"], "capi2mapiVersion": "v1", "namespace": "x"})
        with open(path, encoding="utf-8") as f:
            text = f.read()
        assert text.startswith("# Configuration descriptor")
        assert list(yaml.safe_load(text)) == ["capi2mapiVersion", "exclude", "namespace"]
        assert load_config(path)["namespace"] == "x"


def _write_manifests(directory, docs):
    directory.mkdir()
    with open(directory / "capi.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump_all(docs, f)


class TestCLI:
    def test_parse_manifests_by_kind(self, tmp_path):
        _write_manifests(tmp_path / "in", [make_capi_machine(), make_powervs_machine(), None])
        manifests = parse_manifests(str(tmp_path / "in"))
        assert sorted(manifests) == ["IBMPowerVSMachine", "Machine"]

    def test_main_writes_output(self, tmp_path):
        docs = [make_capi_machine(), make_powervs_machine(), make_powervs_cluster()]
        _write_manifests(tmp_path / "in", docs)
        out = tmp_path / "out"
        main(["--from-dir", str(tmp_path / "in"), "--output-dir", str(out), "-n", "machines"])
        with open(out / "mapi.yml", encoding="utf-8") as f:
            objects = list(yaml.safe_load_all(f))
        assert len(objects) == 1
        machine = objects[0]
        assert machine["metadata"]["namespace"] == "machines"
        assert machine["spec"]["providerSpec"]["value"]["kind"] == "PowerVSMachineProviderConfig"
        assert (out / "capi2mapi.yaml").exists()

    def test_main_exits_on_failure(self, tmp_path, capsys):
        docs = [make_capi_machine(), make_powervs_machine(spec={"network": {}}),
                make_powervs_cluster()]
        _write_manifests(tmp_path / "in", docs)
        with pytest.raises(SystemExit) as exc:
            main(["--from-dir", str(tmp_path / "in"), "--output-dir", str(tmp_path / "out")])
        assert exc.value.code == 1
        err = capsys.readouterr().err
        assert "✗ Machine/worker-0: conversion failed" in err
        assert "spec.network" in err
