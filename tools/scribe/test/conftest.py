"""Shared fixtures for scribe tests."""

import pytest
import sys
import os

# Add the project root to sys.path so 'tools.scribe' is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "..", ".."))

from tools.scribe.config import GenerationOptions
from tools.scribe.protocol import build_protocol


HELLO_WORLD_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<protocol name="hello_world">
  <copyright>Public domain.</copyright>
  <interface name="greeter" version="1">
    <description summary="says hello">A very polite interface.</description>
    <request name="say_hello">
      <arg name="name" type="string"/>
    </request>
    <event name="hello">
      <arg name="greeting" type="string"/>
    </event>
  </interface>
</protocol>
"""


SAMPLE_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<protocol name="sample_core">
  <interface name="wl_display" version="1">
    <request name="sync">
      <arg name="callback" type="new_id" interface="wl_callback"/>
    </request>
    <event name="delete_id">
      <arg name="id" type="uint"/>
    </event>
  </interface>

  <interface name="wl_registry" version="1">
    <request name="bind">
      <arg name="name" type="uint"/>
      <arg name="id" type="new_id"/>
    </request>
    <event name="global">
      <arg name="name" type="uint"/>
      <arg name="interface" type="string"/>
      <arg name="version" type="uint"/>
    </event>
  </interface>

  <interface name="wl_compositor" version="6">
    <request name="create_surface">
      <arg name="id" type="new_id" interface="wl_surface"/>
    </request>
  </interface>

  <interface name="wl_surface" version="6">
    <enum name="error">
      <entry name="invalid_scale" value="0" summary="buffer scale value is invalid"/>
      <entry name="invalid_transform" value="1"/>
    </enum>
    <request name="destroy" type="destructor"/>
    <request name="attach">
      <arg name="buffer" type="object" interface="wl_buffer" allow-null="true"/>
      <arg name="x" type="int"/>
      <arg name="y" type="int"/>
    </request>
    <request name="set_label">
      <arg name="label" type="string" allow-null="true"/>
    </request>
    <event name="enter">
      <arg name="output" type="object" interface="wl_output"/>
    </event>
  </interface>

  <interface name="wl_keyboard" version="9">
    <event name="enter">
      <arg name="serial" type="uint"/>
      <arg name="surface" type="object" interface="wl_surface"/>
      <arg name="keys" type="array"/>
    </event>
  </interface>

  <interface name="sample_factory">
    <request name="create">
      <arg name="kind" type="uint"/>
      <arg name="id" type="new_id"/>
    </request>
  </interface>

  <interface name="zwp_blob_manager_v1" version="2">
    <request name="upload">
      <arg name="blob_id" type="uint"/>
      <arg name="header_bytes" type="array"/>
      <arg name="payload" type="array"/>
    </request>
    <event name="blob_data">
      <arg name="meta" type="array"/>
      <arg name="fd" type="fd"/>
      <arg name="chunk" type="array"/>
      <arg name="scale" type="fixed"/>
    </event>
  </interface>
</protocol>
"""


@pytest.fixture
def hello_xml():
    """Raw hello_world protocol XML."""
    return HELLO_WORLD_XML


@pytest.fixture
def hello_protocol():
    """Parsed hello_world protocol."""
    return build_protocol(HELLO_WORLD_XML)


@pytest.fixture
def sample_protocol():
    """Parsed protocol exercising every argument kind."""
    return build_protocol(SAMPLE_XML)


@pytest.fixture
def server_options():
    return GenerationOptions(role="server", source_path="hello-world.xml")


@pytest.fixture
def client_options():
    return GenerationOptions(role="client", source_path="hello-world.xml")


@pytest.fixture
def body_of():
    """Returns a helper extracting one generated function definition."""
    def function_body(code: str, signature: str) -> str:
        start = code.index(signature)
        end = code.index("\n}\n", start)
        return code[start:end + 2]
    return function_body
