"""PowerVS conversion — IBMPowerVSMachine fields to a PowerVSMachineProviderConfig."""

from capi2mapi.pacts.errors import FieldPath
from capi2mapi.pacts.helpers import deref, nested, object_name
from capi2mapi.pacts.types import (
    PlatformConverter, PowerVSMachineProviderConfig, PowerVSSecretReference,
)
from capi2mapi.core.assemble import MachineAndInfrastructureMachine, MachineSetAndMachineTemplate
from capi2mapi.core.constants import MAPI_NAMESPACE
from capi2mapi.core.encode import raw_extension_from_provider_spec
from capi2mapi.core.references import (
    convert_image, convert_network, convert_service_instance, from_structured,
)


class PowerVSConverter(PlatformConverter):
    """Map CAPIBM PowerVS machines onto the MAPI PowerVS provider config."""
    name = "powervs"
    infra_machine_kind = "IBMPowerVSMachine"
    infra_template_kind = "IBMPowerVSMachineTemplate"
    infra_cluster_kind = "IBMPowerVSCluster"
    provider_config_kind = "PowerVSMachineProviderConfig"

    def to_provider_config(self, machine, infra_machine, infra_cluster):
        """Return (config, warnings, field_errors); every field is attempted."""
        if machine is None or infra_machine is None or infra_cluster is None:
            raise self.machine_precondition_error()

        warnings: list[str] = []
        errors = []
        spec = infra_machine.get("spec") or {}
        fld_path = FieldPath("spec")
        full = object_name(infra_machine)

        if spec.get("serviceInstanceID"):
            warnings.append(f"{full}: spec.serviceInstanceID is deprecated, "
                            f"prefer spec.serviceInstance")
        service_instance, err = convert_service_instance(
            fld_path.child("serviceInstance"), spec.get("serviceInstanceID"),
            spec.get("serviceInstance"))
        if err is not None:
            errors.append(err)

        if spec.get("imageRef") and from_structured(spec.get("image")) is not None:
            warnings.append(f"{full}: both spec.image and spec.imageRef are set, "
                            f"spec.imageRef ignored")
        image, err = convert_image(fld_path.child("image"), spec.get("image"), spec.get("imageRef"))
        if err is not None:
            errors.append(err)

        network, err = convert_network(fld_path.child("network"), spec.get("network"))
        if err is not None:
            errors.append(err)

        config = PowerVSMachineProviderConfig(
            service_instance=service_instance,
            image=image,
            network=network,
            key_pair_name=deref(spec.get("sshKey")),
            system_type=deref(spec.get("systemType")),
            processor_type=deref(spec.get("processorType")),
            processors=spec.get("processors"),
            memory_gib=deref(spec.get("memoryGiB"), 0),
            # credentialsSecret and loadBalancers have no CAPIBM machine counterpart
        )

        user_data_secret = deref(nested(machine, "spec", "bootstrap", "dataSecretName"))
        if user_data_secret:
            config.user_data_secret = PowerVSSecretReference(name=user_data_secret)

        return config, warnings, errors

    def encode(self, config):
        return raw_extension_from_provider_spec(config)


POWERVS = PowerVSConverter()


def from_machine_and_powervs_machine_and_powervs_cluster(
        machine: dict | None, powervs_machine: dict | None, powervs_cluster: dict | None,
        namespace: str = MAPI_NAMESPACE) -> MachineAndInfrastructureMachine:
    """Wrap a CAPI Machine, IBMPowerVSMachine and IBMPowerVSCluster for conversion."""
    return MachineAndInfrastructureMachine(
        POWERVS, machine, powervs_machine, powervs_cluster, namespace)


def from_machine_set_and_powervs_machine_template_and_powervs_cluster(
        machine_set: dict | None, template: dict | None, powervs_cluster: dict | None,
        namespace: str = MAPI_NAMESPACE) -> MachineSetAndMachineTemplate:
    """Wrap a CAPI MachineSet, IBMPowerVSMachineTemplate and IBMPowerVSCluster for conversion."""
    return MachineSetAndMachineTemplate(
        POWERVS, machine_set, template, powervs_cluster, namespace)
