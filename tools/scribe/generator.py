"""
Generation pipeline: read the protocol file, build the model, render the
requested artifacts in memory and only then write them out.
"""

import os
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Tuple

from .client_emitter import emit_client_cpp, emit_client_h
from .config import GenerationOptions, validate_options
from .errors import InputError, OutputError
from .protocol import Protocol, build_protocol
from .server_emitter import emit_server_cpp, emit_server_h
from .signatures import protocol_file
from .types import ROLE_CLIENT, ROLE_SERVER

HEADER = "header"
SOURCE = "source"

HEADER_SUFFIXES = (".h", ".hh", ".hpp")
SOURCE_SUFFIXES = (".cc", ".cpp")

Emitter = Callable[[Protocol, GenerationOptions], str]

# (role, artifact kind) → emitter.
EMITTERS: Dict[Tuple[str, str], Emitter] = {
    (ROLE_SERVER, HEADER): emit_server_h,
    (ROLE_SERVER, SOURCE): emit_server_cpp,
    (ROLE_CLIENT, HEADER): emit_client_h,
    (ROLE_CLIENT, SOURCE): emit_client_cpp,
}


@dataclass
class Artifact:
    kind: str       # HEADER or SOURCE
    path: str
    text: str


def read_input(path: str) -> bytes:
    """Read the protocol file, mapping OS failures to InputError."""
    if not os.path.isfile(path):
        raise InputError(f"Unable to locate the file {path}")
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise InputError(f"Unable to open file {path}: {e.strerror}")


def output_paths(protocol: Protocol, options: GenerationOptions,
                 output: str = "") -> Dict[str, str]:
    """
    Destination path per requested artifact kind.

    Without ``output`` the files land next to the protocol file and are
    named after the protocol and role (``hello-world-server.hpp``).  With
    ``output`` and both artifacts it is used as the stem; for a single
    artifact a missing C++ suffix is appended.
    """
    paths = {}
    if not output:
        directory = os.path.dirname(options.source_path)
        stem = os.path.join(directory, protocol_file(protocol, options.role, ""))
        if options.wants_header:
            paths[HEADER] = stem + ".hpp"
        if options.wants_source:
            paths[SOURCE] = stem + ".cpp"
        return paths

    if options.wants_header and options.wants_source:
        stem, ext = os.path.splitext(output)
        if ext not in HEADER_SUFFIXES + SOURCE_SUFFIXES:
            stem = output
        paths[HEADER] = stem + ".hpp"
        paths[SOURCE] = stem + ".cpp"
    elif options.wants_header:
        paths[HEADER] = output if output.endswith(HEADER_SUFFIXES) else output + ".hpp"
    else:
        paths[SOURCE] = output if output.endswith(SOURCE_SUFFIXES) else output + ".cpp"
    return paths


def render_artifacts(protocol: Protocol, options: GenerationOptions,
                     output: str = "") -> List[Artifact]:
    """Render every requested artifact; nothing touches the filesystem."""
    validate_options(options)
    artifacts = []
    for kind, path in output_paths(protocol, options, output).items():
        text = EMITTERS[(options.role, kind)](protocol, options)
        artifacts.append(Artifact(kind=kind, path=path, text=text))
    return artifacts


def write_artifacts(artifacts: List[Artifact]) -> List[str]:
    """Write rendered artifacts, returning the paths written."""
    written = []
    for artifact in artifacts:
        try:
            os.makedirs(os.path.dirname(artifact.path) or ".", exist_ok=True)
            with open(artifact.path, "w") as f:
                f.write(artifact.text)
        except OSError as e:
            raise OutputError(f"Unable to write {artifact.path}: {e.strerror}")
        written.append(artifact.path)
    return written


def run(spec_path: str, options: GenerationOptions,
        output: str = "") -> List[str]:
    """
    Full pipeline for one protocol file.

    Input and schema errors are raised before any output file is opened.

    Returns:
        The list of files written.
    """
    options = replace(options, source_path=spec_path)
    protocol = build_protocol(read_input(spec_path))
    artifacts = render_artifacts(protocol, options, output)
    return write_artifacts(artifacts)
