"""
Server emitter: generates the ``Wayland::Server`` C++ wrapper header and
source on top of the wayland-scanner ``*-server.h`` marshalling layer.

Each interface becomes a class that can be bound to a single client
resource, advertised as a global, or wrap an existing ``wl_resource``.
Per-client bindings are tracked as ``Resource`` records in a multimap.
"""

from typing import List

from .config import GenerationOptions
from .protocol import Interface, Protocol
from .signatures import (
    INDENT,
    arg_name,
    array_descriptor_lines,
    class_name,
    enum_lines,
    event_signature,
    forwarded_arguments,
    handler_name,
    handler_signature,
    member_name,
    method_name,
    protocol_include,
    provenance,
    wire_arguments,
)
from .types import ROLE_SERVER, should_emit

NAMESPACE = "Wayland::Server"


def _server_interfaces(protocol: Protocol) -> List[Interface]:
    return [i for i in protocol.interfaces if should_emit(i, ROLE_SERVER)]


# ── Header ───────────────────────────────────────────────────────────

def _class_declaration(iface: Interface, options: GenerationOptions) -> List[str]:
    cls = class_name(iface.name, options)
    obj = member_name(iface.name, options)
    i1, i2, i3 = INDENT, INDENT * 2, INDENT * 3
    lines = []

    lines.append(f"{i1}class {cls} {{")
    lines.append(f"{i1}public:")
    lines.append(f"{i2}{cls}(struct ::wl_client *client, uint32_t id, int version);")
    lines.append(f"{i2}{cls}(struct ::wl_display *display, int version);")
    lines.append(f"{i2}{cls}(struct ::wl_resource *resource);")
    lines.append(f"{i2}{cls}();")
    lines.append("")
    lines.append(f"{i2}virtual ~{cls}();")
    lines.append("")

    # Per-client binding record.  The back-reference is non-owning and is
    # nulled when the interface object goes away first.
    lines.append(f"{i2}class Resource {{")
    lines.append(f"{i2}public:")
    lines.append(f"{i3}Resource() : {obj}(nullptr), handle(nullptr) {{}}")
    lines.append(f"{i3}virtual ~Resource() {{}}")
    lines.append("")
    lines.append(f"{i3}{cls} *{obj};")
    lines.append(f"{i3}{cls} *object() {{ return {obj}; }}")
    lines.append(f"{i3}struct ::wl_resource *handle;")
    lines.append("")
    lines.append(f"{i3}struct ::wl_client *client() const {{ return wl_resource_get_client(handle); }}")
    lines.append(f"{i3}int version() const {{ return wl_resource_get_version(handle); }}")
    lines.append("")
    lines.append(f"{i3}static Resource *fromResource(struct ::wl_resource *resource);")
    lines.append(f"{i2}}};")
    lines.append("")

    lines.append(f"{i2}void init(struct ::wl_client *client, uint32_t id, int version);")
    lines.append(f"{i2}void init(struct ::wl_display *display, int version);")
    lines.append(f"{i2}void init(struct ::wl_resource *resource);")
    lines.append("")
    lines.append(f"{i2}Resource *add(struct ::wl_client *client, int version);")
    lines.append(f"{i2}Resource *add(struct ::wl_client *client, uint32_t id, int version);")
    lines.append("")
    lines.append(f"{i2}Resource *resource() {{ return m_resource; }}")
    lines.append(f"{i2}const Resource *resource() const {{ return m_resource; }}")
    lines.append("")
    lines.append(f"{i2}const std::multimap<struct ::wl_client *, Resource *> &resourceMap() const {{ return m_resource_map; }}")
    lines.append("")
    lines.append(f"{i2}bool isGlobal() const {{ return m_global != nullptr; }}")
    lines.append(f"{i2}bool isResource() const {{ return m_resource != nullptr; }}")
    lines.append("")
    lines.append(f"{i2}static const struct ::wl_interface *interface();")
    lines.append(f"{i2}static std::string interfaceName() {{ return interface()->name; }}")
    lines.append(f"{i2}static int interfaceVersion() {{ return interface()->version; }}")

    lines.extend(enum_lines(iface.enums))

    if iface.events:
        lines.append("")
        for e in iface.events:
            lines.append(f"{i2}void {event_signature(e, options, prefix='send')};")
            lines.append(f"{i2}void {event_signature(e, options, prefix='send', with_resource=True)};")

    lines.append("")
    lines.append(f"{i1}protected:")
    lines.append(f"{i2}virtual Resource *allocate();")
    lines.append("")
    lines.append(f"{i2}virtual void bindResource(Resource *resource);")
    lines.append(f"{i2}virtual void destroyResource(Resource *resource);")

    if iface.requests:
        lines.append("")
        for e in iface.requests:
            lines.append(f"{i2}virtual void {event_signature(e, options)};")

    lines.append("")
    lines.append(f"{i1}private:")
    lines.append(f"{i2}static void bind_func(struct ::wl_client *client, void *data, uint32_t version, uint32_t id);")
    lines.append(f"{i2}static void destroy_func(struct ::wl_resource *client_resource);")
    lines.append(f"{i2}static void display_destroy_func(struct ::wl_listener *listener, void *data);")
    lines.append("")
    lines.append(f"{i2}Resource *bind(struct ::wl_client *client, uint32_t id, int version);")
    lines.append(f"{i2}Resource *bind(struct ::wl_resource *handle);")

    if iface.requests:
        lines.append("")
        lines.append(f"{i2}static const struct ::{iface.name}_interface m_{iface.name}_interface;")
        lines.append("")
        for e in iface.requests:
            lines.append(f"{i2}static void {handler_signature(e, iface.name, options)};")

    lines.append("")
    lines.append(f"{i2}std::multimap<struct ::wl_client *, Resource *> m_resource_map;")
    lines.append(f"{i2}Resource *m_resource = nullptr;")
    lines.append(f"{i2}struct ::wl_global *m_global = nullptr;")
    lines.append(f"{i2}struct DisplayDestroyedListener : ::wl_listener {{")
    lines.append(f"{i3}{cls} *parent;")
    lines.append(f"{i2}}};")
    lines.append(f"{i2}DisplayDestroyedListener m_displayDestroyedListener;")
    lines.append(f"{i1}}};")
    return lines


def emit_server_h(protocol: Protocol, options: GenerationOptions) -> str:
    """Generate the server wrapper header."""
    lines = provenance(options, is_header=True)
    lines.append('#include "wayland-server-core.h"')
    lines.append(protocol_include(protocol, options, ".h"))
    lines.append("")
    lines.append("#include <map>")
    lines.append("#include <utility>")
    lines.append("")
    lines.append("namespace Wayland {")
    lines.append("namespace Server {")

    for n, iface in enumerate(_server_interfaces(protocol)):
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
    obj = member_name(iface.name, options)
    q = f"{NAMESPACE}::{cls}"
    table = f"&m_{iface.name}_interface" if iface.requests else "nullptr"
    lines = []

    lines.append(f"{q}::{cls}(struct ::wl_client *client, uint32_t id, int version) {{")
    lines.append("    init(client, id, version);")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::{cls}(struct ::wl_display *display, int version) {{")
    lines.append("    init(display, version);")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::{cls}(struct ::wl_resource *resource) {{")
    lines.append("    init(resource);")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::{cls}() {{")
    lines.append("}")
    lines.append("")

    lines.append(f"{q}::~{cls}() {{")
    lines.append("    for (auto &entry : m_resource_map) {")
    lines.append(f"        entry.second->{obj} = nullptr;")
    lines.append("    }")
    lines.append("")
    lines.append("    if (m_resource) {")
    lines.append(f"        m_resource->{obj} = nullptr;")
    lines.append("    }")
    lines.append("")
    lines.append("    if (m_global) {")
    lines.append("        wl_global_destroy(m_global);")
    lines.append("        wl_list_remove(&m_displayDestroyedListener.link);")
    lines.append("    }")
    lines.append("}")
    lines.append("")

    lines.append(f"void {q}::init(struct ::wl_client *client, uint32_t id, int version) {{")
    lines.append("    m_resource = bind(client, id, version);")
    lines.append("}")
    lines.append("")
    lines.append(f"void {q}::init(struct ::wl_resource *resource) {{")
    lines.append("    m_resource = bind(resource);")
    lines.append("}")
    lines.append("")
    lines.append(f"void {q}::init(struct ::wl_display *display, int version) {{")
    lines.append(f"    m_global = wl_global_create(display, &::{iface.name}_interface, version, this, bind_func);")
    lines.append(f"    m_displayDestroyedListener.notify = {cls}::display_destroy_func;")
    lines.append("    m_displayDestroyedListener.parent = this;")
    lines.append("    wl_display_add_destroy_listener(display, &m_displayDestroyedListener);")
    lines.append("}")
    lines.append("")

    lines.append(f"{q}::Resource *{q}::add(struct ::wl_client *client, int version) {{")
    lines.append("    Resource *resource = bind(client, 0, version);")
    lines.append("    m_resource_map.insert(std::pair{client, resource});")
    lines.append("    return resource;")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::Resource *{q}::add(struct ::wl_client *client, uint32_t id, int version) {{")
    lines.append("    Resource *resource = bind(client, id, version);")
    lines.append("    m_resource_map.insert(std::pair{client, resource});")
    lines.append("    return resource;")
    lines.append("}")
    lines.append("")

    lines.append(f"const struct ::wl_interface *{q}::interface() {{")
    lines.append(f"    return &::{iface.name}_interface;")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::Resource *{q}::allocate() {{")
    lines.append("    return new Resource;")
    lines.append("}")
    lines.append("")
    lines.append(f"void {q}::bindResource(Resource *) {{")
    lines.append("}")
    lines.append("")
    lines.append(f"void {q}::destroyResource(Resource *) {{")
    lines.append("}")
    lines.append("")

    # Trampolines registered with libwayland.
    lines.append(f"void {q}::bind_func(struct ::wl_client *client, void *data, uint32_t version, uint32_t id) {{")
    lines.append(f"    {cls} *that = static_cast<{cls} *>(data);")
    lines.append("    that->add(client, id, version);")
    lines.append("}")
    lines.append("")
    lines.append(f"void {q}::display_destroy_func(struct ::wl_listener *listener, void *) {{")
    lines.append(f"    {cls} *that = static_cast<{cls}::DisplayDestroyedListener *>(listener)->parent;")
    lines.append("    that->m_global = nullptr;")
    lines.append("}")
    lines.append("")
    lines.append(f"void {q}::destroy_func(struct ::wl_resource *client_resource) {{")
    lines.append("    Resource *resource = Resource::fromResource(client_resource);")
    lines.append("    if (!resource) {")
    lines.append("        return;")
    lines.append("    }")
    lines.append("")
    lines.append(f"    {cls} *that = resource->{obj};")
    lines.append("    if (that) {")
    lines.append("        auto it = that->m_resource_map.begin();")
    lines.append("        while (it != that->m_resource_map.end()) {")
    lines.append("            if (it->first == resource->client()) {")
    lines.append("                it = that->m_resource_map.erase(it);")
    lines.append("            }")
    lines.append("            else {")
    lines.append("                ++it;")
    lines.append("            }")
    lines.append("        }")
    lines.append("        that->destroyResource(resource);")
    lines.append("")
    lines.append(f"        that = resource->{obj};")
    lines.append("        if (that && that->m_resource == resource) {")
    lines.append("            that->m_resource = nullptr;")
    lines.append("        }")
    lines.append("    }")
    lines.append("    delete resource;")
    lines.append("}")
    lines.append("")

    lines.append(f"{q}::Resource *{q}::bind(struct ::wl_client *client, uint32_t id, int version) {{")
    lines.append(f"    struct ::wl_resource *handle = wl_resource_create(client, &::{iface.name}_interface, version, id);")
    lines.append("    return bind(handle);")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::Resource *{q}::bind(struct ::wl_resource *handle) {{")
    lines.append("    Resource *resource = allocate();")
    lines.append(f"    resource->{obj} = this;")
    lines.append("")
    lines.append(f"    wl_resource_set_implementation(handle, {table}, resource, destroy_func);")
    lines.append("    resource->handle = handle;")
    lines.append("    bindResource(resource);")
    lines.append("    return resource;")
    lines.append("}")
    lines.append("")
    lines.append(f"{q}::Resource *{q}::Resource::fromResource(struct ::wl_resource *resource) {{")
    lines.append("    if (!resource) {")
    lines.append("        return nullptr;")
    lines.append("    }")
    lines.append(f"    if (wl_resource_instance_of(resource, &::{iface.name}_interface, {table})) {{")
    lines.append("        return static_cast<Resource *>(wl_resource_get_user_data(resource));")
    lines.append("    }")
    lines.append("    return nullptr;")
    lines.append("}")
    return lines


def _requests(iface: Interface, options: GenerationOptions) -> List[str]:
    cls = class_name(iface.name, options)
    obj = member_name(iface.name, options)
    q = f"{NAMESPACE}::{cls}"
    lines = []

    lines.append("")
    lines.append(f"const struct ::{iface.name}_interface {q}::m_{iface.name}_interface = {{")
    handlers = [f"    {q}::{handler_name(e, options)}" for e in iface.requests]
    lines.append(",\n".join(handlers))
    lines.append("};")

    # Default request implementations: override points for subclasses.
    for e in iface.requests:
        lines.append("")
        lines.append(f"void {q}::{event_signature(e, options, omit_names=True)} {{")
        lines.append("}")

    for e in iface.requests:
        args = ", ".join(["r"] + forwarded_arguments(e, options))
        lines.append("")
        lines.append(f"void {q}::{handler_signature(e, iface.name, options)} {{")
        lines.append("    Resource *r = Resource::fromResource(resource);")
        lines.append(f"    if (!r || !r->{obj}) {{")
        if e.is_destructor:
            lines.append("        wl_resource_destroy(resource);")
        lines.append("        return;")
        lines.append("    }")
        lines.append(f"    r->{obj}->{method_name(e, options)}({args});")
        lines.append("}")
    return lines


def _events(iface: Interface, options: GenerationOptions) -> List[str]:
    cls = class_name(iface.name, options)
    q = f"{NAMESPACE}::{cls}"
    lines = []

    for e in iface.events:
        send = "send" + method_name(e, options, capitalize=True)
        implicit_args = ", ".join(
            ["m_resource->handle"] + [arg_name(a, options) for a in e.arguments])

        lines.append("")
        lines.append(f"void {q}::{event_signature(e, options, prefix='send')} {{")
        lines.append("    if (!m_resource) {")
        lines.append("        return;")
        lines.append("    }")
        lines.append(f"    {send}({implicit_args});")
        lines.append("}")
        lines.append("")
        lines.append(f"void {q}::{event_signature(e, options, prefix='send', with_resource=True)} {{")
        lines.extend(array_descriptor_lines(e, options))
        wire_args = ", ".join(["resource"] + wire_arguments(e, options))
        lines.append(f"    {iface.name}_send_{e.name}({wire_args});")
        lines.append("}")
    return lines


def emit_server_cpp(protocol: Protocol, options: GenerationOptions) -> str:
    """Generate the server wrapper implementation."""
    lines = provenance(options, is_header=False)
    lines.append(protocol_include(protocol, options, ".h"))
    lines.append(protocol_include(protocol, options, ".hpp"))

    for iface in _server_interfaces(protocol):
        lines.append("")
        lines.extend(_lifecycle(iface, options))
        if iface.requests:
            lines.extend(_requests(iface, options))
        lines.extend(_events(iface, options))

    lines.append("")
    return "\n".join(lines)
