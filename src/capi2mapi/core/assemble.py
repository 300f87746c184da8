"""Machine and MachineSet assembly — platform mapping, metadata, envelope, aggregation."""

from capi2mapi.pacts.errors import EncodingError, aggregate
from capi2mapi.pacts.helpers import nested
from capi2mapi.pacts.types import PlatformConverter
from capi2mapi.core.constants import MAPI_NAMESPACE
from capi2mapi.core.metadata import (
    from_capi_machine_set_to_mapi_machine_set, from_capi_machine_to_mapi_machine,
)


class MachineAndInfrastructureMachine:
    """A CAPI Machine with its infrastructure machine and cluster, bound to one platform."""

    def __init__(self, platform: PlatformConverter, machine: dict | None,
                 infra_machine: dict | None, infra_cluster: dict | None,
                 namespace: str = MAPI_NAMESPACE):
        self.platform = platform
        self.machine = machine
        self.infra_machine = infra_machine
        self.infra_cluster = infra_cluster
        self.namespace = namespace

    def _missing_input(self) -> bool:
        return self.machine is None or self.infra_machine is None or self.infra_cluster is None

    def to_provider_spec(self):
        """Map the triple into the platform provider config: (config, warnings, errors)."""
        if self._missing_input():
            raise self.platform.machine_precondition_error()
        return self.platform.to_provider_config(
            self.machine, self.infra_machine, self.infra_cluster)

    def build(self):
        """Run every stage, keeping the partial machine: (machine, warnings, errors)."""
        errors: list = []
        warnings: list[str] = []

        provider_config, warn, errs = self.to_provider_spec()
        errors.extend(errs)
        warnings.extend(warn)

        mapi_machine, warn, errs = from_capi_machine_to_mapi_machine(self.machine, self.namespace)
        errors.extend(errs)
        warnings.extend(warn)

        raw_ext = None
        try:
            raw_ext = self.platform.encode(provider_config)
        except EncodingError as exc:
            errors.append(exc)

        mapi_machine["spec"]["providerSpec"]["value"] = raw_ext
        return mapi_machine, warnings, errors

    def to_machine(self):
        """Convert into a MAPI Machine: (machine | None, warnings, AggregateError | None).

        A missing input yields the platform PreconditionError and nothing else.
        """
        if self._missing_input():
            return None, [], self.platform.machine_precondition_error()
        mapi_machine, warnings, errors = self.build()
        err = aggregate(errors)
        if err is not None:
            return None, warnings, err
        return mapi_machine, warnings, None


class MachineSetAndMachineTemplate:
    """A CAPI MachineSet with its infrastructure machine template and cluster."""

    def __init__(self, platform: PlatformConverter, machine_set: dict | None,
                 template: dict | None, infra_cluster: dict | None,
                 namespace: str = MAPI_NAMESPACE):
        self.platform = platform
        self.machine_set = machine_set
        self.template = template
        self.infra_cluster = infra_cluster
        self.namespace = namespace

    def machine_conversion(self) -> MachineAndInfrastructureMachine:
        """Derive the single-machine view from the set's template."""
        template_meta = nested(self.machine_set, "spec", "template", "metadata", default={})
        template_spec = nested(self.machine_set, "spec", "template", "spec", default={})
        set_name = nested(self.machine_set, "metadata", "name", default="")
        machine = {
            "kind": "Machine",
            "metadata": {
                "name": set_name,
                "labels": template_meta.get("labels"),
                "annotations": template_meta.get("annotations"),
            },
            "spec": template_spec,
        }
        infra_spec = nested(self.template, "spec", "template", "spec", default={})
        infra_machine = {"kind": self.platform.infra_machine_kind, "spec": infra_spec}
        return MachineAndInfrastructureMachine(
            self.platform, machine, infra_machine, self.infra_cluster, self.namespace)

    def to_machine_set(self):
        """Convert into a MAPI MachineSet: (machine_set | None, warnings, AggregateError | None).

        A missing input yields the platform PreconditionError and nothing else.
        """
        if self.machine_set is None or self.template is None or self.infra_cluster is None:
            return None, [], self.platform.machine_set_precondition_error()

        errors: list = []
        warnings: list[str] = []

        # Full machine conversion so machine-level errors in the template surface here too
        mapi_machine, warn, errs = self.machine_conversion().build()
        errors.extend(errs)
        warnings.extend(warn)

        mapi_machine_set, warn, errs = from_capi_machine_set_to_mapi_machine_set(
            self.machine_set, self.namespace)
        errors.extend(errs)
        warnings.extend(warn)

        template = mapi_machine_set["spec"]["template"]
        template["spec"] = mapi_machine["spec"]
        # The template metadata mirrors the converted machine's, never diverges
        template_meta = {}
        if "labels" in mapi_machine["metadata"]:
            template_meta["labels"] = mapi_machine["metadata"]["labels"]
        if "annotations" in mapi_machine["metadata"]:
            template_meta["annotations"] = mapi_machine["metadata"]["annotations"]
        template["metadata"] = template_meta

        err = aggregate(errors)
        if err is not None:
            return None, warnings, err
        return mapi_machine_set, warnings, None
