"""
Schema-driven value transformation.

Field descriptors describe declared-resource attributes. ``encode`` turns a
declared value into the JSON shape an endpoint expects and ``decode`` turns
it back. Nested objects are a one-element list in the declared model and a
bare object on the wire.
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldKind(Enum):
    """Supported attribute kinds."""
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    INT_LIST = "int_list"
    NESTED = "nested"
    OBJECT_SET = "object_set"  # declared only; encode/decode reject it


PRIMITIVE_KINDS = {FieldKind.STRING, FieldKind.BOOL, FieldKind.INT, FieldKind.INT_LIST}


class SchemaContractError(TypeError):
    """A descriptor was used in a way the transformer does not support."""


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Describes one declared-resource attribute.

    Attributes:
        name: Declared attribute name
        kind: Value kind
        wire_name: JSON key used by the API (defaults to ``name``)
        required: Must be supplied by the operator
        computed: Set by the service, never sent
        force_new: Changing it requires replacing the resource
        write_only: Sent but never re-read; hashed before being kept in state
        default: Value used when the operator leaves it unset
        max_items: Element limit for NESTED attributes (must be 1)
        children: Child descriptors for NESTED attributes
    """
    name: str
    kind: FieldKind
    wire_name: str | None = None
    required: bool = False
    computed: bool = False
    force_new: bool = False
    write_only: bool = False
    default: Any = None
    max_items: int | None = None
    children: tuple["FieldDescriptor", ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.kind is FieldKind.NESTED:
            if self.max_items != 1:
                raise ValueError(
                    f"Nested attribute '{self.name}' must allow exactly one element"
                )
            if not self.children:
                raise ValueError(f"Nested attribute '{self.name}' has no child fields")
        elif self.kind is FieldKind.OBJECT_SET:
            if not self.children:
                raise ValueError(f"Object set '{self.name}' has no child fields")
        elif self.children:
            raise ValueError(f"Only object attributes may declare children ('{self.name}')")

    @property
    def key(self) -> str:
        """Wire field name."""
        return self.wire_name or self.name


def _check_supported(descriptor: FieldDescriptor) -> None:
    if not isinstance(descriptor, FieldDescriptor):
        raise SchemaContractError(f"Not a field descriptor: {descriptor!r}")
    if descriptor.kind in PRIMITIVE_KINDS:
        return
    if descriptor.kind is FieldKind.NESTED and descriptor.max_items == 1:
        return
    raise SchemaContractError(
        f"Unsupported descriptor kind for '{descriptor.name}': {descriptor.kind}"
    )


def encode(descriptor: FieldDescriptor, value: Any) -> Any:
    """Convert a declared value into its wire value."""
    _check_supported(descriptor)

    if descriptor.kind in PRIMITIVE_KINDS:
        return value

    if not value:
        return None
    if len(value) != 1:
        raise SchemaContractError(
            f"Attribute '{descriptor.name}' holds {len(value)} elements, expected 1"
        )
    return encode_object(descriptor.children, value[0])


def decode(descriptor: FieldDescriptor, wire_value: Any) -> Any:
    """Convert a wire value back into its declared value."""
    _check_supported(descriptor)

    if descriptor.kind in PRIMITIVE_KINDS:
        return wire_value

    if wire_value is None:
        return []
    return [decode_object(descriptor.children, wire_value)]


def encode_object(children: tuple[FieldDescriptor, ...], values: dict[str, Any]) -> dict[str, Any]:
    """Encode a declared field-name mapping into a flat wire object."""
    return {
        child.key: encode(child, values.get(child.name, child.default))
        for child in children
    }


def decode_object(children: tuple[FieldDescriptor, ...], wire: dict[str, Any]) -> dict[str, Any]:
    """Decode a flat wire object into a declared field-name mapping."""
    return {
        child.name: decode(child, wire.get(child.key, child.default))
        for child in children
    }


def encode_fields(descriptors, values: dict[str, Any]) -> dict[str, Any]:
    """
    Build a request payload from declared values.

    Computed attributes are skipped; unset attributes take their default.
    """
    payload = {}
    for descriptor in descriptors:
        if descriptor.computed:
            continue
        value = values.get(descriptor.name, descriptor.default)
        payload[descriptor.key] = encode(descriptor, value)
    return payload


def decode_fields(descriptors, wire: dict[str, Any]) -> dict[str, Any]:
    """
    Read declared values out of a response payload.

    Write-only attributes are never re-read and are left out of the result.
    Attributes absent from the payload are left out as well.
    """
    values = {}
    for descriptor in descriptors:
        if descriptor.write_only or descriptor.key not in wire:
            continue
        values[descriptor.name] = decode(descriptor, wire[descriptor.key])
    return values


def hash_for_state(value: Any) -> str:
    """SHA-1 hex digest kept in state in place of a write-only string."""
    if not isinstance(value, str):
        return ""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def validate_values(descriptors, values: dict[str, Any]) -> list[str]:
    """Return the names of required attributes that have no value."""
    return [
        d.name for d in descriptors
        if d.required and values.get(d.name) in (None, "", [])
    ]
