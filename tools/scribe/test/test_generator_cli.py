"""Tests for the generation pipeline and the command line front end."""

import os

import pytest

from tools.scribe.__main__ import build_arg_parser, main, options_from_args
from tools.scribe.config import GenerationOptions
from tools.scribe.errors import InputError, OutputError
from tools.scribe.generator import (
    HEADER,
    SOURCE,
    Artifact,
    output_paths,
    read_input,
    render_artifacts,
    run,
    write_artifacts,
)


@pytest.fixture
def spec_file(tmp_path, hello_xml):
    path = tmp_path / "hello-world.xml"
    path.write_text(hello_xml)
    return path


# -- Pipeline ---------------------------------------------------------------

class TestReadInput:
    def test_reads_bytes(self, spec_file):
        assert read_input(str(spec_file)).startswith(b"<?xml")

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError, match="Unable to locate"):
            read_input(str(tmp_path / "nope.xml"))

    def test_directory_is_not_a_file(self, tmp_path):
        with pytest.raises(InputError):
            read_input(str(tmp_path))


class TestOutputPaths:
    def test_default_next_to_protocol(self, hello_protocol):
        options = GenerationOptions(source_path=os.path.join("protocols", "hello-world.xml"))
        paths = output_paths(hello_protocol, options)
        assert paths == {
            HEADER: os.path.join("protocols", "hello-world-server.hpp"),
            SOURCE: os.path.join("protocols", "hello-world-server.cpp"),
        }

    def test_default_client(self, hello_protocol):
        options = GenerationOptions(role="client", source_path="hello-world.xml")
        paths = output_paths(hello_protocol, options)
        assert paths[HEADER] == "hello-world-client.hpp"
        assert paths[SOURCE] == "hello-world-client.cpp"

    def test_default_header_only(self, hello_protocol):
        options = GenerationOptions(artifacts="header", source_path="hello-world.xml")
        assert output_paths(hello_protocol, options) == {HEADER: "hello-world-server.hpp"}

    def test_stem_for_both(self, hello_protocol):
        paths = output_paths(hello_protocol, GenerationOptions(), "gen/greeter")
        assert paths == {HEADER: "gen/greeter.hpp", SOURCE: "gen/greeter.cpp"}

    def test_known_suffix_dropped_for_both(self, hello_protocol):
        paths = output_paths(hello_protocol, GenerationOptions(), "gen/greeter.h")
        assert paths == {HEADER: "gen/greeter.hpp", SOURCE: "gen/greeter.cpp"}

    def test_unknown_suffix_kept_in_stem(self, hello_protocol):
        paths = output_paths(hello_protocol, GenerationOptions(), "gen/greeter.v1")
        assert paths[HEADER] == "gen/greeter.v1.hpp"

    def test_single_artifact_suffix(self, hello_protocol):
        header = GenerationOptions(artifacts="header")
        assert output_paths(hello_protocol, header, "out/g.h") == {HEADER: "out/g.h"}
        assert output_paths(hello_protocol, header, "out/g") == {HEADER: "out/g.hpp"}
        source = GenerationOptions(artifacts="source")
        assert output_paths(hello_protocol, source, "out/g.cc") == {SOURCE: "out/g.cc"}
        assert output_paths(hello_protocol, source, "out/g") == {SOURCE: "out/g.cpp"}


class TestRenderAndWrite:
    def test_render_both(self, hello_protocol, server_options):
        artifacts = render_artifacts(hello_protocol, server_options)
        kinds = [a.kind for a in artifacts]
        assert kinds == [HEADER, SOURCE]
        assert "class Greeter {" in artifacts[0].text
        assert "Wayland::Server::Greeter::Greeter()" in artifacts[1].text

    def test_render_client(self, hello_protocol, client_options):
        artifacts = render_artifacts(hello_protocol, client_options)
        assert "namespace Client {" in artifacts[0].text

    def test_write_creates_directories(self, tmp_path):
        path = tmp_path / "a" / "b" / "x.hpp"
        written = write_artifacts([Artifact(kind=HEADER, path=str(path), text="// x\n")])
        assert written == [str(path)]
        assert path.read_text() == "// x\n"

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        target = blocker / "x.hpp"
        with pytest.raises(OutputError, match="Unable to write"):
            write_artifacts([Artifact(kind=HEADER, path=str(target), text="")])

    def test_run(self, spec_file, tmp_path):
        written = run(str(spec_file), GenerationOptions())
        assert sorted(os.path.basename(p) for p in written) == [
            "hello-world-server.cpp", "hello-world-server.hpp"]
        text = (tmp_path / "hello-world-server.hpp").read_text()
        assert f"// Source: {spec_file}" in text

    def test_run_leaves_options_untouched(self, spec_file):
        options = GenerationOptions(artifacts="header")
        run(str(spec_file), options)
        assert options.source_path == ""


# -- Command line -----------------------------------------------------------

class TestArgParser:
    def test_role_required(self):
        with pytest.raises(SystemExit) as exc:
            build_arg_parser().parse_args([])
        assert exc.value.code == 2

    def test_roles_exclusive(self):
        with pytest.raises(SystemExit) as exc:
            build_arg_parser().parse_args(["--server", "a.xml", "--client", "a.xml"])
        assert exc.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            build_arg_parser().parse_args(["--version"])
        assert exc.value.code == 0
        assert "wayland-scribe 1.0.0" in capsys.readouterr().out

    def test_flags_to_options(self):
        args = build_arg_parser().parse_args([
            "--client", "a.xml", "--header", "--header-path", "wayland",
            "--prefix", "zwp_", "--add-include", "cstdint", "--add-include", "vector"])
        options = options_from_args(args)
        assert options.role == "client"
        assert options.artifacts == "header"
        assert options.header_path == "wayland"
        assert options.prefix == "zwp_"
        assert options.includes == ["cstdint", "vector"]

    def test_header_and_source_means_both(self):
        args = build_arg_parser().parse_args(["--server", "a.xml", "--header", "--source"])
        assert options_from_args(args).artifacts == "both"

    def test_config_then_flags(self, tmp_path):
        config = tmp_path / "scribe.yaml"
        config.write_text("artifacts: source\nprefix: xdg_\nincludes: [cstdint]\n")
        args = build_arg_parser().parse_args([
            "--server", "a.xml", "--config", str(config),
            "--prefix", "zwp_", "--add-include", "vector"])
        options = options_from_args(args)
        assert options.artifacts == "source"
        assert options.prefix == "zwp_"
        assert options.includes == ["cstdint", "vector"]


class TestMain:
    def test_default_outputs(self, spec_file, tmp_path, capsys):
        assert main(["--server", str(spec_file)]) == 0
        assert (tmp_path / "hello-world-server.hpp").exists()
        assert (tmp_path / "hello-world-server.cpp").exists()
        out = capsys.readouterr().out
        assert "  wrote " in out
        assert "Generated 2 server file(s)" in out

    def test_header_only(self, spec_file, tmp_path):
        assert main(["--client", str(spec_file), "--header"]) == 0
        assert (tmp_path / "hello-world-client.hpp").exists()
        assert not (tmp_path / "hello-world-client.cpp").exists()

    def test_explicit_output(self, spec_file, tmp_path):
        stem = tmp_path / "gen" / "greeter"
        assert main(["--server", str(spec_file), str(stem)]) == 0
        assert (tmp_path / "gen" / "greeter.hpp").exists()
        assert (tmp_path / "gen" / "greeter.cpp").exists()

    def test_extra_positionals_warn(self, spec_file, tmp_path, capsys):
        out = tmp_path / "first"
        assert main(["--server", str(spec_file), str(out), "second", "third"]) == 0
        err = capsys.readouterr().err
        assert "[Warning]: Ignoring the extra argument(s): (second third)" in err
        assert (tmp_path / "first.hpp").exists()
        assert not (tmp_path / "second.hpp").exists()

    def test_missing_input(self, tmp_path, capsys):
        assert main(["--server", str(tmp_path / "missing.xml")]) == 1
        assert "[Error]: Unable to locate the file" in capsys.readouterr().err
        assert os.listdir(tmp_path) == []

    def test_malformed_writes_nothing(self, tmp_path, capsys):
        spec = tmp_path / "broken.xml"
        spec.write_text('<protocol name="broken"><interface name="a">\n</protocol>\n')
        assert main(["--server", str(spec)]) == 1
        assert "[Error]: XML error:" in capsys.readouterr().err
        assert os.listdir(tmp_path) == ["broken.xml"]

    def test_wrong_root_writes_nothing(self, tmp_path, capsys):
        spec = tmp_path / "other.xml"
        spec.write_text("<catalog/>\n")
        assert main(["--client", str(spec)]) == 1
        assert "not a wayland protocol file" in capsys.readouterr().err
        assert os.listdir(tmp_path) == ["other.xml"]

    def test_missing_name_writes_nothing(self, tmp_path, capsys):
        spec = tmp_path / "anon.xml"
        spec.write_text("<protocol><interface name=\"a\"/></protocol>\n")
        assert main(["--server", str(spec)]) == 1
        assert "Missing protocol name" in capsys.readouterr().err

    def test_bad_config(self, spec_file, tmp_path, capsys):
        config = tmp_path / "bad.yaml"
        config.write_text("flavour: spicy\n")
        assert main(["--server", str(spec_file), "--config", str(config)]) == 1
        assert "Unknown option(s): flavour" in capsys.readouterr().err
        assert not (tmp_path / "hello-world-server.hpp").exists()

    def test_missing_config(self, spec_file, tmp_path, capsys):
        assert main(["--server", str(spec_file), "--config", str(tmp_path / "none.yaml")]) == 1
        assert "Unable to read config" in capsys.readouterr().err

    def test_undecodable_config(self, spec_file, tmp_path, capsys):
        config = tmp_path / "binary.yaml"
        config.write_bytes(b"prefix: \xff\xfe\n")
        assert main(["--server", str(spec_file), "--config", str(config)]) == 1
        assert "[Error]: Unable to read config" in capsys.readouterr().err
        assert not (tmp_path / "hello-world-server.hpp").exists()

    def test_config_applied(self, spec_file, tmp_path):
        config = tmp_path / "scribe.yaml"
        config.write_text("artifacts: header\nincludes:\n  - cstdint\n")
        assert main(["--server", str(spec_file), "--config", str(config)]) == 0
        header = tmp_path / "hello-world-server.hpp"
        assert "#include <cstdint>" in header.read_text()
        assert not (tmp_path / "hello-world-server.cpp").exists()

    def test_both_roles_rejected(self, spec_file):
        with pytest.raises(SystemExit) as exc:
            main(["--server", str(spec_file), "--client", str(spec_file)])
        assert exc.value.code == 2
