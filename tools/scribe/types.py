"""
Type system: identifier normalization, wire-to-C++ type mapping and the
interface filter shared by all emitters.
"""

from typing import Optional

from .protocol import Argument, Event, Interface

# Generation roles.
ROLE_SERVER = "server"
ROLE_CLIENT = "client"
ROLES = (ROLE_SERVER, ROLE_CLIENT)

# Interfaces provided by libwayland itself.
DISPLAY_INTERFACE = "wl_display"
REGISTRY_INTERFACE = "wl_registry"

# Namespace prefixes stripped when no explicit prefix is configured.
RESERVED_PREFIXES = ("wl_", "qt_")

# Wire type name → C++ type name, for the types that do not depend on role.
TYPE_MAP = {
    "int":   "int32_t",
    "uint":  "uint32_t",
    "fixed": "wl_fixed_t",
    "fd":    "int32_t",
}

# Wire type → (C++ wrapper type, C ABI type) for borrowed types.
BORROWED_TYPES = {
    "string": ("const std::string &", "const char *"),
    "array":  ("const struct ::wl_array &", "struct ::wl_array *"),
}


# ── Identifier normalizer ────────────────────────────────────────────

def to_host_case(identifier: str, capitalize_first: bool) -> str:
    """snake_case → camelCase (or CamelCase when ``capitalize_first``)."""
    out = []
    upper_next = capitalize_first
    for ch in identifier:
        if ch == "_":
            upper_next = True
        else:
            out.append(ch.upper() if upper_next else ch)
            upper_next = False
    return "".join(out)


def strip_interface_prefix(name: str, capitalize_first: bool,
                           prefix: str = "") -> str:
    """
    Drop the interface namespace prefix from ``name`` and camel-case the rest.

    A configured ``prefix`` wins over the reserved ``wl_``/``qt_`` prefixes.
    Only one prefix is ever stripped.
    """
    if prefix and name.startswith(prefix):
        name = name[len(prefix):]
    else:
        for reserved in RESERVED_PREFIXES:
            if name.startswith(reserved):
                name = name[len(reserved):]
                break
    return to_host_case(name, capitalize_first)


# ── Type mapper ──────────────────────────────────────────────────────

def wire_to_host_type(wire_type: str, interface_ref: str, role: str,
                      abi: bool = False) -> str:
    """
    Map a wire argument type to the C++ type used in generated signatures.

    ``abi`` selects the C type that the wayland-scanner generated layer
    uses; otherwise the wrapper-facing type is returned.  Unknown wire
    types are passed through verbatim.
    """
    if wire_type in TYPE_MAP:
        return TYPE_MAP[wire_type]
    if wire_type in BORROWED_TYPES:
        host, c_type = BORROWED_TYPES[wire_type]
        return c_type if abi else host
    if wire_type in ("object", "new_id"):
        if role == ROLE_SERVER:
            return "struct ::wl_resource *"
        if not interface_ref:
            return "struct ::wl_object *"
        return f"struct ::{interface_ref} *"
    return wire_type


def new_id_argument(event: Event) -> Optional[Argument]:
    """The ``new_id`` argument of ``event``, if it has one."""
    for arg in event.arguments:
        if arg.is_new_id:
            return arg
    return None


def declare(c_type: str, name: str) -> str:
    """Join a type and a name, hugging ``*``/``&``: ``const char *name``."""
    if not name:
        return c_type.rstrip()
    if c_type.endswith(("*", "&")):
        return f"{c_type}{name}"
    return f"{c_type} {name}"


# ── Interface filter ─────────────────────────────────────────────────

def should_emit(interface: Interface, role: str) -> bool:
    """False for interfaces that libwayland implements for this role."""
    if interface.name == DISPLAY_INTERFACE:
        return False
    if role == ROLE_SERVER and interface.name == REGISTRY_INTERFACE:
        return False
    return True
