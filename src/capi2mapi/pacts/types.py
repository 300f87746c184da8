"""Public data types for platform converters — the sacred contracts."""

import json
from dataclasses import dataclass, field

from capi2mapi.pacts.errors import PreconditionError

# PowerVSResource discriminants and the JSON key each one carries its value under
RESOURCE_TYPE_ID = "ID"
RESOURCE_TYPE_NAME = "Name"
RESOURCE_TYPE_REGEX = "RegEx"
_RESOURCE_VALUE_KEYS = {
    RESOURCE_TYPE_ID: "id",
    RESOURCE_TYPE_NAME: "name",
    RESOURCE_TYPE_REGEX: "regex",
}


@dataclass(frozen=True)
class PowerVSResource:
    """A PowerVS resource identified by exactly one of ID, name or regex."""
    type: str
    value: str

    def __post_init__(self):
        if self.type not in _RESOURCE_VALUE_KEYS:
            raise ValueError(f"unknown PowerVS resource type {self.type!r}")
        if not self.value:
            raise ValueError(f"PowerVS resource of type {self.type} needs a value")

    @classmethod
    def by_id(cls, value: str) -> "PowerVSResource":
        return cls(RESOURCE_TYPE_ID, value)

    @classmethod
    def by_name(cls, value: str) -> "PowerVSResource":
        return cls(RESOURCE_TYPE_NAME, value)

    @classmethod
    def by_regex(cls, value: str) -> "PowerVSResource":
        return cls(RESOURCE_TYPE_REGEX, value)

    def to_dict(self) -> dict:
        return {"type": self.type, _RESOURCE_VALUE_KEYS[self.type]: self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "PowerVSResource":
        """Parse the MAPI JSON shape; the type discriminant selects the value key."""
        rtype = data.get("type", "")
        key = _RESOURCE_VALUE_KEYS.get(rtype)
        if key is None:
            raise ValueError(f"unknown PowerVS resource type {rtype!r}")
        return cls(rtype, data.get(key) or "")


@dataclass(frozen=True)
class PowerVSSecretReference:
    """Reference to a secret in the machine's namespace."""
    name: str

    def to_dict(self) -> dict:
        return {"name": self.name}


@dataclass(frozen=True)
class LoadBalancerReference:
    name: str
    type: str

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type}


@dataclass
class PowerVSMachineProviderConfig:
    """Legacy MAPI provider config for PowerVS, always stamped with its kind."""
    kind: str = field(default="PowerVSMachineProviderConfig", init=False)
    api_version: str = field(default="machine.openshift.io/v1", init=False)
    service_instance: PowerVSResource | None = None
    image: PowerVSResource | None = None
    network: PowerVSResource | None = None
    key_pair_name: str = ""
    system_type: str = ""
    processor_type: str = ""
    processors: int | str | None = None
    memory_gib: int = 0
    user_data_secret: PowerVSSecretReference | None = None
    credentials_secret: PowerVSSecretReference | None = None
    load_balancers: list = field(default_factory=list)

    def to_dict(self) -> dict:
        """Render in the field order of the MAPI JSON schema, omitting empty optionals."""
        out: dict = {"kind": self.kind, "apiVersion": self.api_version}
        if self.user_data_secret is not None:
            out["userDataSecret"] = self.user_data_secret.to_dict()
        if self.credentials_secret is not None:
            out["credentialsSecret"] = self.credentials_secret.to_dict()
        out["serviceInstance"] = self.service_instance.to_dict() if self.service_instance else {}
        out["image"] = self.image.to_dict() if self.image else {}
        out["network"] = self.network.to_dict() if self.network else {}
        out["keyPairName"] = self.key_pair_name
        if self.system_type:
            out["systemType"] = self.system_type
        if self.processor_type:
            out["processorType"] = self.processor_type
        if self.processors is not None and self.processors != "":
            out["processors"] = self.processors
        if self.memory_gib:
            out["memoryGiB"] = self.memory_gib
        if self.load_balancers:
            out["loadBalancers"] = [lb.to_dict() for lb in self.load_balancers]
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "PowerVSMachineProviderConfig":
        def _resource(key):
            val = data.get(key) or {}
            return PowerVSResource.from_dict(val) if val.get("type") else None

        def _secret(key):
            val = data.get(key)
            return PowerVSSecretReference(val.get("name", "")) if val else None

        return cls(
            service_instance=_resource("serviceInstance"),
            image=_resource("image"),
            network=_resource("network"),
            key_pair_name=data.get("keyPairName", ""),
            system_type=data.get("systemType", ""),
            processor_type=data.get("processorType", ""),
            processors=data.get("processors"),
            memory_gib=data.get("memoryGiB", 0),
            user_data_secret=_secret("userDataSecret"),
            credentials_secret=_secret("credentialsSecret"),
            load_balancers=[LoadBalancerReference(lb.get("name", ""), lb.get("type", ""))
                            for lb in data.get("loadBalancers") or []],
        )


@dataclass(frozen=True)
class RawExtension:
    """Opaque serialized payload; no bytes means no provider config."""
    raw: bytes = b""

    def is_empty(self) -> bool:
        return not self.raw

    def to_object(self) -> dict | None:
        """Decode for rendering (e.g. into YAML output)."""
        if self.is_empty():
            return None
        return json.loads(self.raw)


@dataclass
class ConvertContext:
    """Shared state passed through a conversion run over a manifest set."""
    config: dict
    namespace: str
    machines: dict = field(default_factory=dict)
    machine_sets: dict = field(default_factory=dict)
    clusters: dict = field(default_factory=dict)
    infra: dict = field(default_factory=dict)
    warnings: list = field(default_factory=list)
    failures: list = field(default_factory=list)


class PlatformConverter:
    """Base class for per-platform field mappers.

    Assemblers only talk to this contract: the kinds it consumes, how it maps
    a machine triple into the platform's provider config, and how that config
    is packed into the envelope.
    """
    name: str = ""
    infra_machine_kind: str = ""
    infra_template_kind: str = ""
    infra_cluster_kind: str = ""
    provider_config_kind: str = ""

    def to_provider_config(self, machine, infra_machine, infra_cluster):
        """Return (config, warnings, field_errors). Override in subclasses."""
        raise NotImplementedError

    def encode(self, config) -> RawExtension:
        """Pack config into a RawExtension. Override in subclasses."""
        raise NotImplementedError

    def machine_precondition_error(self):
        return PreconditionError(
            f"provided Machine, {self.infra_machine_kind} and "
            f"{self.infra_cluster_kind} can not be nil")

    def machine_set_precondition_error(self):
        return PreconditionError(
            f"provided MachineSet, {self.infra_template_kind} and "
            f"{self.infra_cluster_kind} can not be nil")
