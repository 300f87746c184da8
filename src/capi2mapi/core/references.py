"""Resource reference normalization — CAPIBM ID/name/regex fields to one MAPI tag."""

from capi2mapi.pacts.errors import FieldError, FieldPath, invalid
from capi2mapi.pacts.types import PowerVSResource

# Structured reference keys in the order they are consulted
_REFERENCE_ORDER = (
    ("id", PowerVSResource.by_id),
    ("name", PowerVSResource.by_name),
    ("regex", PowerVSResource.by_regex),
)


def from_structured(reference: dict | None) -> PowerVSResource | None:
    """First set tag of an IBMPowerVSResourceReference, ID before name before regex."""
    if not reference:
        return None
    for key, build in _REFERENCE_ORDER:
        value = reference.get(key)
        if value:
            return build(value)
    return None


def normalize_reference(fld_path: FieldPath, reference: dict | None,
                        legacy_id: str | None = "", fallback: dict | None = None,
                        detail: str = "unable to convert reference to MAPI",
                        ) -> tuple[PowerVSResource | None, FieldError | None]:
    """Resolve a reference to exactly one tagged PowerVSResource.

    A non-empty legacy ID wins outright. Otherwise the structured reference is
    consulted, then the name-only fallback (a LocalObjectReference). Empty
    strings count as unset.
    """
    if legacy_id:
        return PowerVSResource.by_id(legacy_id), None
    resolved = from_structured(reference)
    if resolved is not None:
        return resolved, None
    fallback_name = (fallback or {}).get("name")
    if fallback_name:
        return PowerVSResource.by_name(fallback_name), None
    return None, invalid(fld_path, reference, detail)


def convert_service_instance(fld_path: FieldPath, service_instance_id: str | None,
                             service_instance: dict | None):
    """serviceInstanceID (deprecated) takes precedence over serviceInstance."""
    if not service_instance_id and service_instance is None:
        return None, invalid(fld_path, service_instance,
                             "unable to convert service instance, service instance is nil")
    return normalize_reference(fld_path, service_instance, legacy_id=service_instance_id,
                               detail="unable to convert service instance to MAPI")


def convert_image(fld_path: FieldPath, image: dict | None, image_ref: dict | None):
    """image is consulted first; imageRef only names an IBMPowerVSImage object."""
    if image is None and image_ref is None:
        return None, invalid(fld_path, image,
                             "unable to convert image, image and imageref is nil")
    return normalize_reference(fld_path, image, fallback=image_ref,
                               detail="unable to convert image to MAPI")


def convert_network(fld_path: FieldPath, network: dict | None):
    return normalize_reference(fld_path, network or {},
                               detail="unable to convert network to MAPI")
