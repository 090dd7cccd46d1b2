"""
Client emitter: generates the ``Wayland::Client`` C++ wrapper header and
source on top of the wayland-scanner ``*-client.h`` marshalling layer.
"""

from typing import List, Optional

from .config import GenerationOptions
from .protocol import Event, Interface, Protocol
from .signatures import (
    INDENT,
    array_descriptor_lines,
    class_name,
    enum_lines,
    event_signature,
    forwarded_arguments,
    handler_name,
    handler_signature,
    method_name,
    protocol_include,
    provenance,
    wire_arguments,
)
from .types import ROLE_CLIENT, new_id_argument, should_emit

NAMESPACE = "Wayland::Client"

# wl_registry_bind is itself generated from the protocol, so the wrapper
# marshals the bind request directly, exactly as the C stub would.
REGISTRY_BIND_HELPER = """\
static inline void *wlRegistryBind(struct ::wl_registry *registry, uint32_t name, const struct ::wl_interface *interface, uint32_t version) {
    const uint32_t bindOpCode = 0;
    return (void *) wl_proxy_marshal_constructor_versioned((struct ::wl_proxy *) registry, bindOpCode, interface, version, name, interface->name, version, nullptr);
}"""


def _client_interfaces(protocol: Protocol) -> List[Interface]:
    return [i for i in protocol.interfaces if should_emit(i, ROLE_CLIENT)]


def request_return_type(event: Event) -> Optional[str]:
    """Return type of a client request wrapper: the new object, or None."""
    new_id = new_id_argument(event)
    if new_id is None:
        return None
    if not new_id.interface_ref:
        return "void *"
    return f"struct ::{new_id.interface_ref} *"


def _returning(event: Event) -> str:
    """``void `` / ``void *`` / ``struct ::x *`` ready to prefix a name."""
    ret = request_return_type(event)
    return "void " if ret is None else ret


# ── Header ───────────────────────────────────────────────────────────

def _class_declaration(iface: Interface, options: GenerationOptions) -> List[str]:
    cls = class_name(iface.name, options)
    name = iface.name
    i1, i2 = INDENT, INDENT * 2
    lines = []

    lines.append(f"{i1}class {cls} {{")
    lines.append(f"{i1}public:")
    lines.append(f"{i2}{cls}(struct ::wl_registry *registry, uint32_t id, int version);")
    lines.append(f"{i2}{cls}(struct ::{name} *object);")
    lines.append(f"{i2}{cls}();")
    lines.append("")
    lines.append(f"{i2}virtual ~{cls}();")
    lines.append("")
    lines.append(f"{i2}void init(struct ::wl_registry *registry, uint32_t id, int version);")
    lines.append(f"{i2}void init(struct ::{name} *object);")
    lines.append("")
    lines.append(f"{i2}struct ::{name} *object() {{ return m_{name}; }}")
    lines.append(f"{i2}const struct ::{name} *object() const {{ return m_{name}; }}")
    lines.append(f"{i2}static {cls} *fromObject(struct ::{name} *object);")
    lines.append("")
    lines.append(f"{i2}bool isInitialized() const;")
    lines.append(f"{i2}uint32_t version() const;")
    lines.append("")
    lines.append(f"{i2}static const struct ::wl_interface *interface();")

    lines.extend(enum_lines(iface.enums))

    if iface.requests:
        lines.append("")
        for e in iface.requests:
            lines.append(f"{i2}{_returning(e)}{event_signature(e, options)};")

    if iface.events:
        lines.append("")
        lines.append(f"{i1}protected:")
        for e in iface.events:
            lines.append(f"{i2}virtual void {event_signature(e, options)};")

    lines.append("")
    lines.append(f"{i1}private:")
    if iface.events:
        lines.append(f"{i2}void init_listener();")
        lines.append(f"{i2}static const struct ::{name}_listener m_{name}_listener;")
        for e in iface.events:
            lines.append(f"{i2}static void {handler_signature(e, name, options)};")
        lines.append("")
    lines.append(f"{i2}struct ::{name} *m_{name};")
    lines.append(f"{i1}}};")
    return lines


def emit_client_h(protocol: Protocol, options: GenerationOptions) -> str:
    """Generate the client wrapper header."""
    lines = provenance(options, is_header=True)
    lines.append(protocol_include(protocol, options, ".h"))
    lines.append("")
    lines.append("struct wl_registry;")
    lines.append("")
    lines.append("namespace Wayland {")
    lines.append("namespace Client {")

    for n, iface in enumerate(_client_interfaces(protocol)):
        if n:
            lines.append("")
        lines.extend(_class_declaration(iface, options))

    lines.append("}")
    lines.append("}")
    lines.append("")
    return "\n".join(lines)


# ── Source ───────────────────────────────────────────────────────────

def _lifecycle(iface: Interface, options: GenerationOptions) -> List[str]:
    cls = class_name(iface.name, options)
    name = iface.name
    q = f"{NAMESPACE}::{cls}"
    lines = []

    # Without a listener there is nothing that stores ``this`` on the proxy.
    if iface.events:
        attach = ["    init_listener();"]
    else:
        attach = [f"    {name}_set_user_data(m_{name}, this);"]

    lines.append(f"{q}::{cls}(struct ::wl_registry *registry, uint32_t id, int version)")
    lines.append(f"    : m_{name}(nullptr) {{")
    lines.append("    init(registry, id, version);")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::{cls}(struct ::{name} *obj)")
    lines.append(f"    : m_{name}(nullptr) {{")
    lines.append("    init(obj);")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::{cls}()")
    lines.append(f"    : m_{name}(nullptr) {{")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::~{cls}() {{")
    lines.append("}")
    lines.append("")

    lines.append(f"void {q}::init(struct ::wl_registry *registry, uint32_t id, int version) {{")
    lines.append(f"    m_{name} = static_cast<struct ::{name} *>(wlRegistryBind(registry, id, &::{name}_interface, version));")
    lines.extend(attach)
    lines.append("}")
    lines.append("")
    lines.append(f"void {q}::init(struct ::{name} *obj) {{")
    lines.append(f"    m_{name} = obj;")
    lines.extend(attach)
    lines.append("}")
    lines.append("")

    lines.append(f"{q} *{q}::fromObject(struct ::{name} *object) {{")
    lines.append("    if (!object) {")
    lines.append("        return nullptr;")
    lines.append("    }")
    if iface.events:
        lines.append(f"    if (wl_proxy_get_listener((struct ::wl_proxy *) object) != (void *) &m_{name}_listener) {{")
        lines.append("        return nullptr;")
        lines.append("    }")
    lines.append(f"    return static_cast<{q} *>({name}_get_user_data(object));")
    lines.append("}")
    lines.append("")

    lines.append(f"bool {q}::isInitialized() const {{")
    lines.append(f"    return m_{name} != nullptr;")
    lines.append("}")
    lines.append("")
    lines.append(f"uint32_t {q}::version() const {{")
    lines.append(f"    return wl_proxy_get_version(reinterpret_cast<struct ::wl_proxy *>(m_{name}));")
    lines.append("}")
    lines.append("")
    lines.append(f"const struct ::wl_interface *{q}::interface() {{")
    lines.append(f"    return &::{name}_interface;")
    lines.append("}")
    return lines


def _requests(iface: Interface, options: GenerationOptions) -> List[str]:
    cls = class_name(iface.name, options)
    name = iface.name
    q = f"{NAMESPACE}::{cls}"
    lines = []

    for e in iface.requests:
        ret = "return " if new_id_argument(e) is not None else ""
        args = ", ".join([f"m_{name}"] + wire_arguments(e, options))
        lines.append("")
        lines.append(f"{_returning(e)}{q}::{event_signature(e, options)} {{")
        lines.extend(array_descriptor_lines(e, options))
        lines.append(f"    {ret}::{name}_{e.name}({args});")
        if e.is_destructor:
            lines.append(f"    m_{name} = nullptr;")
        lines.append("}")
    return lines


def _events(iface: Interface, options: GenerationOptions) -> List[str]:
    cls = class_name(iface.name, options)
    name = iface.name
    q = f"{NAMESPACE}::{cls}"
    lines = []

    for e in iface.events:
        lines.append("")
        lines.append(f"void {q}::{event_signature(e, options, omit_names=True)} {{")
        lines.append("}")
        lines.append("")
        lines.append(f"void {q}::{handler_signature(e, name, options)} {{")
        args = ", ".join(forwarded_arguments(e, options))
        lines.append(f"    static_cast<{q} *>(data)->{method_name(e, options)}({args});")
        lines.append("}")

    lines.append("")
    lines.append(f"const struct ::{name}_listener {q}::m_{name}_listener = {{")
    for e in iface.events:
        lines.append(f"    {q}::{handler_name(e, options)},")
    lines.append("};")
    lines.append("")
    lines.append(f"void {q}::init_listener() {{")
    lines.append(f"    {name}_add_listener(m_{name}, &m_{name}_listener, this);")
    lines.append("}")
    return lines


def emit_client_cpp(protocol: Protocol, options: GenerationOptions) -> str:
    """Generate the client wrapper implementation."""
    lines = provenance(options, is_header=False)
    lines.append(protocol_include(protocol, options, ".h"))
    lines.append(protocol_include(protocol, options, ".hpp"))
    lines.append("")
    lines.append(REGISTRY_BIND_HELPER)

    for iface in _client_interfaces(protocol):
        lines.append("")
        lines.extend(_lifecycle(iface, options))
        lines.extend(_requests(iface, options))
        if iface.events:
            lines.extend(_events(iface, options))

    lines.append("")
    return "\n".join(lines)
