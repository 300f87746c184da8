"""Shared CAPI / CAPIBM manifest fixtures — plain dicts, as yaml.safe_load yields them."""

import pytest


def make_capi_machine(name="worker-0", labels=None, annotations=None, data_secret="worker-user-data"):
    machine = {
        "apiVersion": "cluster.x-k8s.io/v1beta1",
        "kind": "Machine",
        "metadata": {"name": name, "namespace": "openshift-cluster-api"},
        "spec": {
            "clusterName": "ocp",
            "bootstrap": {"dataSecretName": data_secret},
            "infrastructureRef": {
                "apiVersion": "infrastructure.cluster.x-k8s.io/v1beta2",
                "kind": "IBMPowerVSMachine",
                "name": name,
            },
        },
    }
    if labels is not None:
        machine["metadata"]["labels"] = labels
    if annotations is not None:
        machine["metadata"]["annotations"] = annotations
    return machine


def make_powervs_spec():
    return {
        "serviceInstance": {"id": "si-123"},
        "image": {"name": "rhcos-415"},
        "network": {"regex": "^DHCPSERVER.*Private$"},
        "sshKey": "ocp-key",
        "systemType": "s922",
        "processorType": "Shared",
        "processors": "0.5",
        "memoryGiB": 32,
    }


def make_powervs_machine(name="worker-0", spec=None):
    return {
        "apiVersion": "infrastructure.cluster.x-k8s.io/v1beta2",
        "kind": "IBMPowerVSMachine",
        "metadata": {"name": name, "namespace": "openshift-cluster-api"},
        "spec": spec if spec is not None else make_powervs_spec(),
    }


def make_powervs_cluster(name="ocp"):
    return {
        "apiVersion": "infrastructure.cluster.x-k8s.io/v1beta2",
        "kind": "IBMPowerVSCluster",
        "metadata": {"name": name, "namespace": "openshift-cluster-api"},
        "spec": {"serviceInstance": {"id": "si-123"}, "zone": "dal10"},
    }


def make_capi_machine_set(name="worker-set", template_labels=None, template_annotations=None,
                          template_name="worker-template"):
    template_meta = {}
    if template_labels is not None:
        template_meta["labels"] = template_labels
    if template_annotations is not None:
        template_meta["annotations"] = template_annotations
    return {
        "apiVersion": "cluster.x-k8s.io/v1beta1",
        "kind": "MachineSet",
        "metadata": {"name": name, "namespace": "openshift-cluster-api"},
        "spec": {
            "clusterName": "ocp",
            "replicas": 3,
            "selector": {"matchLabels": {"tier": "worker"}},
            "template": {
                "metadata": template_meta,
                "spec": {
                    "clusterName": "ocp",
                    "bootstrap": {"dataSecretName": "worker-user-data"},
                    "infrastructureRef": {
                        "apiVersion": "infrastructure.cluster.x-k8s.io/v1beta2",
                        "kind": "IBMPowerVSMachineTemplate",
                        "name": template_name,
                    },
                },
            },
        },
    }


def make_powervs_template(name="worker-template", spec=None):
    return {
        "apiVersion": "infrastructure.cluster.x-k8s.io/v1beta2",
        "kind": "IBMPowerVSMachineTemplate",
        "metadata": {"name": name, "namespace": "openshift-cluster-api"},
        "spec": {"template": {"spec": spec if spec is not None else make_powervs_spec()}},
    }


@pytest.fixture
def capi_machine():
    return make_capi_machine()


@pytest.fixture
def powervs_machine():
    return make_powervs_machine()


@pytest.fixture
def powervs_cluster():
    return make_powervs_cluster()
