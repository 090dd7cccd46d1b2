"""
Printing helpers shared by the server and client emitters: provenance and
include lines, request/event signatures, trampoline signatures, argument
forwarding and enum classes.
"""

from typing import List

from . import GENERATOR_NAME, __version__
from .config import GenerationOptions
from .protocol import Argument, Enum, Event, Protocol
from .types import (
    ROLE_SERVER,
    declare,
    strip_interface_prefix,
    wire_to_host_type,
)

INDENT = "    "


# ── File preamble ────────────────────────────────────────────────────

def provenance(options: GenerationOptions, is_header: bool) -> List[str]:
    """Provenance comment, include guard and the common includes."""
    lines = [f"// Auto-generated by {GENERATOR_NAME} v{__version__} -- DO NOT EDIT"]
    lines.append(f"// Source: {options.source_path}")
    lines.append("")
    if is_header:
        lines.append("#pragma once")
        lines.append("")
    for inc in options.includes:
        lines.append(f"#include {include_target(inc)}")
    lines.append("#include <string>")
    return lines


def include_target(inc: str) -> str:
    """Bracket an extra include unless it is already quoted or bracketed."""
    if inc.startswith(("<", '"')):
        return inc
    return f"<{inc}>"


def protocol_file(protocol: Protocol, role: str, suffix: str) -> str:
    """``hello_world`` → ``hello-world-server.h`` (for suffix ``.h``)."""
    return f"{protocol.name.replace('_', '-')}-{role}{suffix}"


def protocol_include(protocol: Protocol, options: GenerationOptions,
                     suffix: str) -> str:
    filename = protocol_file(protocol, options.role, suffix)
    if options.header_path:
        return f"#include <{options.header_path.rstrip('/')}/{filename}>"
    return f'#include "{filename}"'


# ── Names ────────────────────────────────────────────────────────────

def class_name(interface_name: str, options: GenerationOptions) -> str:
    return strip_interface_prefix(interface_name, True, options.prefix)


def member_name(interface_name: str, options: GenerationOptions) -> str:
    """Back-reference member of the server binding record."""
    return strip_interface_prefix(interface_name, False, options.prefix) + "Object"


def method_name(event: Event, options: GenerationOptions,
                capitalize: bool = False) -> str:
    return strip_interface_prefix(event.name, capitalize, options.prefix)


def arg_name(arg: Argument, options: GenerationOptions) -> str:
    return strip_interface_prefix(arg.name, False, options.prefix)


def handler_name(event: Event, options: GenerationOptions) -> str:
    return "handle" + method_name(event, options, capitalize=True)


# ── Signatures ───────────────────────────────────────────────────────

def event_parameters(event: Event, options: GenerationOptions,
                     with_resource: bool = False,
                     omit_names: bool = False) -> List[str]:
    """
    Wrapper-facing parameter list of a request or event.

    Server requests start with the ``Resource *`` binding record and the
    explicit send overload of an event starts with the ``wl_resource``.
    ``new_id`` arguments get the role-dependent treatment: a plain id on
    server requests, synthesized ``interface``/``version`` parameters on
    generic client requests, and nothing on typed client requests (the
    object becomes the return value).
    """
    server = options.role == ROLE_SERVER
    params = []

    def named(c_type, name):
        return declare(c_type, "" if omit_names else name)

    if server and event.is_request:
        params.append(named("Resource *", "resource"))
    elif server and with_resource:
        params.append(named("struct ::wl_resource *", "resource"))

    for arg in event.arguments:
        name = arg_name(arg, options)
        if arg.is_new_id:
            if server and event.is_request:
                params.append(named("uint32_t", name))
                continue
            if not server and event.is_request:
                if not arg.interface_ref:
                    params.append(named("const struct ::wl_interface *", "interface"))
                    params.append(named("uint32_t", "version"))
                continue
            if not server and not arg.interface_ref:
                continue
        host = wire_to_host_type(arg.wire_type, arg.interface_ref, options.role)
        params.append(named(host, name))
    return params


def event_signature(event: Event, options: GenerationOptions,
                    prefix: str = "", with_resource: bool = False,
                    omit_names: bool = False) -> str:
    """``sayHello(Resource *resource, const std::string &name)``.

    ``prefix`` is prepended to the method name, capitalizing it
    (``send`` + ``hello`` → ``sendHello``).
    """
    name = prefix + method_name(event, options, capitalize=bool(prefix))
    params = event_parameters(event, options, with_resource, omit_names)
    return f"{name}({', '.join(params)})"


def handler_parameters(event: Event, interface_name: str,
                       options: GenerationOptions) -> List[str]:
    """C ABI parameter list of a dispatch-table / listener trampoline."""
    server = options.role == ROLE_SERVER
    if server:
        params = ["::wl_client *client", "struct ::wl_resource *resource"]
    else:
        params = ["void *data", f"struct ::{interface_name} *object"]

    for arg in event.arguments:
        name = arg_name(arg, options)
        if server and arg.is_new_id:
            # The C layer hands a generic new_id over as interface/version/id.
            if not arg.interface_ref:
                params.append("const char *interface")
                params.append("uint32_t version")
            params.append(declare("uint32_t", name))
        else:
            c_type = wire_to_host_type(arg.wire_type, arg.interface_ref,
                                       options.role, abi=True)
            params.append(declare(c_type, name))
    return params


def handler_signature(event: Event, interface_name: str,
                      options: GenerationOptions) -> str:
    params = handler_parameters(event, interface_name, options)
    return f"{handler_name(event, options)}({', '.join(params)})"


# ── Argument conversion ──────────────────────────────────────────────

def forwarded_arguments(event: Event, options: GenerationOptions) -> List[str]:
    """Trampoline → virtual stub: C ABI values converted to wrapper types."""
    server = options.role == ROLE_SERVER
    values = []
    for arg in event.arguments:
        name = arg_name(arg, options)
        if not server and arg.is_new_id and not arg.interface_ref:
            continue
        if arg.wire_type == "string":
            if arg.allow_null:
                values.append(f"{name} ? std::string({name}) : std::string()")
            else:
                values.append(f"std::string({name})")
        elif arg.wire_type == "array":
            values.append(f"*{name}")
        else:
            values.append(name)
    return values


def wire_arguments(event: Event, options: GenerationOptions) -> List[str]:
    """Wrapper method → generated C call: wrapper values converted to C ABI."""
    server = options.role == ROLE_SERVER
    values = []
    for arg in event.arguments:
        name = arg_name(arg, options)
        if not server and arg.is_new_id:
            if not arg.interface_ref:
                values.append("interface")
                values.append("version")
            continue
        if arg.wire_type == "string":
            if arg.allow_null:
                values.append(f"{name}.empty() ? nullptr : {name}.c_str()")
            else:
                values.append(f"{name}.c_str()")
        elif arg.wire_type == "array":
            values.append(f"&{name}_data")
        else:
            values.append(name)
    return values


def array_descriptor_lines(event: Event, options: GenerationOptions,
                           indent: str = INDENT) -> List[str]:
    """One non-owning ``wl_array`` per array argument, in argument order."""
    lines = []
    for arg in event.arguments:
        if arg.wire_type != "array":
            continue
        name = arg_name(arg, options)
        lines.append(f"{indent}struct ::wl_array {name}_data;")
        lines.append(f"{indent}{name}_data.size = {name}.size;")
        lines.append(f"{indent}{name}_data.alloc = 0;")
        lines.append(f"{indent}{name}_data.data = {name}.data;")
        lines.append("")
    return lines


# ── Enums ────────────────────────────────────────────────────────────

def enum_lines(enums: List[Enum], indent: str = INDENT * 2) -> List[str]:
    lines = []
    for enum in enums:
        lines.append("")
        lines.append(f"{indent}enum class {enum.name} {{")
        for entry in enum.entries:
            line = f"{indent}{INDENT}{enum.name}_{entry.name} = {entry.value},"
            if entry.summary is not None:
                line += f" // {entry.summary}"
            lines.append(line)
        lines.append(f"{indent}}};")
    return lines
