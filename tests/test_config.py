"""
Tests for config loading and RemapperConfig assembly

Covers the fail-safe policy: structural errors fall back to the default
config, per-entry errors only drop that entry or remote.
"""

import pytest

from oscremap.config import (
    DEFAULT_CONFIG_PATH,
    FAILED_REMOTE_NAME,
    RemapperConfig,
    build_config,
    default_config,
    load_config,
    parse_mappings,
    parse_remote,
    resolve_config_path,
)
from oscremap.routes import RouteTable


def assert_is_default(config):
    assert len(config) == 1
    remote = config.remotes[0]
    assert remote.name == FAILED_REMOTE_NAME
    assert remote.host == "127.0.0.1"
    assert remote.port == 7000
    assert dict(remote.mappings) == {"/": ("/failed/to/load/config",)}


class TestDefaultConfig:
    """Test default_config()."""

    def test_single_failed_remote(self):
        """Default config holds exactly the failed-load remote."""
        assert_is_default(default_config())

    def test_default_remote_is_alive(self):
        """Default remote still handles and remaps "/"."""
        remote = default_config().remotes[0]

        assert remote.should_handle("/")
        assert remote.remap("/") == ["/failed/to/load/config"]
        assert remote.filter_prefix == "/failed/to/load/"


class TestBuildConfig:
    """Test build_config() on parsed generic data."""

    def test_valid_config(self, console_data):
        """Well-formed data builds every remote with its fields."""
        config = build_config(console_data)

        assert [r.name for r in config] == ["Console", "Mirror"]
        console = config.remotes[0]
        assert console.host == "10.0.0.5"
        assert console.port == 9000
        assert console.remap("/lx/tempo/bpm") == ["/remote/tempo/bpm"]
        assert config.remotes[1].is_passthrough

    @pytest.mark.parametrize("data", [
        None,
        "remotes",
        ["remotes"],
        42,
        {},
        {"remotes": None},
        {"remotes": "Console"},
        {"remotes": {"name": "Console"}},
        {"other": []},
    ])
    def test_structural_errors_fall_back(self, data):
        """Malformed roots and remotes values yield the default config."""
        assert_is_default(build_config(data))

    def test_empty_remotes_falls_back(self):
        """The engine never ends up with zero tables."""
        assert_is_default(build_config({"remotes": []}))

    def test_all_remotes_invalid_falls_back(self):
        """No surviving remote yields the default config."""
        assert_is_default(build_config({"remotes": ["Console", 7, None]}))

    def test_invalid_remote_skipped(self, console_data):
        """A non-mapping remote record is skipped, the rest kept."""
        console_data["remotes"].insert(1, "not a mapping")

        config = build_config(console_data)

        assert [r.name for r in config] == ["Console", "Mirror"]

    def test_missing_fields_use_defaults(self):
        """Missing name, ip, port and mappings take their defaults."""
        config = build_config({"remotes": [{}]})

        remote = config.remotes[0]
        assert remote.name == "Unknown"
        assert remote.host == "127.0.0.1"
        assert remote.port == 7000
        assert len(remote.mappings) == 0
        assert remote.filter_prefix == "/lx"

    def test_unexpected_error_falls_back(self, monkeypatch):
        """Unexpected exceptions during the build yield the default config."""
        def explode(record):
            raise RuntimeError("boom")

        monkeypatch.setattr("oscremap.config.parse_remote", explode)

        assert_is_default(build_config({"remotes": [{"name": "Console"}]}))

    def test_declaration_order_kept(self):
        """Remotes keep their declaration order."""
        config = build_config({"remotes": [{"name": n} for n in "CAB"]})

        assert [r.name for r in config] == ["C", "A", "B"]

    def test_idempotent(self, console_data):
        """Building twice from the same data behaves identically."""
        first = build_config(console_data)
        second = build_config(console_data)

        probes = ["/lx/tempo/beat", "/lx/tempo/bpm", "/lx/color/red", "/lx/tempo"]
        for a, b in zip(first, second):
            assert a.filter_prefix == b.filter_prefix
            assert a.is_passthrough == b.is_passthrough
            for address in probes:
                assert a.should_handle(address) == b.should_handle(address)
                assert a.remap(address) == b.remap(address)


class TestParseRemote:
    """Test parse_remote() field handling."""

    @pytest.mark.parametrize("port, expected", [
        (9000, 9000),
        ("9000", 9000),
        (" 9001 ", 9001),
        (9000.0, 9000),
        (0, 0),
        (65535, 65535),
        ("abc", 7000),
        (True, 7000),
        (70000, 7000),
        (-1, 7000),
        (9000.5, 7000),
    ])
    def test_port_parsing(self, port, expected):
        """Ports accept ints and numeric strings, else default to 7000."""
        remote = parse_remote({"name": "R", "port": port})

        assert remote.port == expected

    def test_non_string_fields_converted(self):
        """Non-string name and ip are converted with str()."""
        remote = parse_remote({"name": 12, "ip": 10})

        assert remote.name == "12"
        assert remote.host == "10"

    def test_non_mapping_record(self):
        """A record that is not a mapping returns None."""
        assert parse_remote(["name", "Console"]) is None

    def test_non_mapping_mappings(self):
        """A non-mapping mappings field gives an empty table."""
        remote = parse_remote({"name": "R", "mappings": ["/a", "/b"]})

        assert isinstance(remote, RouteTable)
        assert len(remote.mappings) == 0

    def test_invalid_wildcard_entries_dropped(self):
        """Invalid wildcard entries are dropped, valid ones kept."""
        remote = parse_remote({"name": "R", "mappings": {
            "/lx/tempo/*": ["/out/a", "/out/b"],
            "/lx/color/*": ["/out/color"],
            "/lx/ok/*": ["/out/ok/*"],
        }})

        assert list(remote.mappings) == ["/lx/ok/*"]


class TestParseMappings:
    """Test parse_mappings() per-entry validation."""

    def test_scalar_value_skipped(self, caplog):
        """A scalar destination value is skipped and logged."""
        mappings = parse_mappings("R", {
            "/lx/a": "/out/a",
            "/lx/b": ["/out/b"],
        })

        assert mappings == {"/lx/b": ["/out/b"]}
        assert "must be a list" in caplog.text

    def test_nested_value_skipped(self):
        """Nested lists, nulls and mappings as targets are skipped."""
        mappings = parse_mappings("R", {
            "/lx/a": [["/out/a"]],
            "/lx/b": [None],
            "/lx/c": [{"x": 1}],
        })

        assert mappings == {}

    def test_non_string_keys_and_targets_converted(self):
        """Numeric keys and targets are converted to strings."""
        mappings = parse_mappings("R", {1: [2, "/out/b"]})

        assert mappings == {"1": ["2", "/out/b"]}

    def test_none(self):
        """Missing mappings parse to an empty dict."""
        assert parse_mappings("R", None) == {}


class TestRemapperConfig:
    """Test RemapperConfig container."""

    def test_find_first_match(self):
        """find() returns the first table with the name, or None."""
        first = RouteTable("Dup", port=1)
        second = RouteTable("Dup", port=2)
        config = RemapperConfig([first, second])

        assert config.find("Dup") is first
        assert config.find("Missing") is None

    def test_remotes_immutable(self):
        """Later changes to the input list do not leak in."""
        tables = [RouteTable("A")]
        config = RemapperConfig(tables)
        tables.append(RouteTable("B"))

        assert isinstance(config.remotes, tuple)
        assert len(config) == 1


class TestLoadConfig:
    """Test load_config() from YAML files."""

    def test_load_yaml(self, write_config):
        path = write_config("""
            remotes:
              - name: "Console"
                ip: "10.0.0.5"
                port: 9000
                mappings:
                  /lx/tempo/beat: ["/remote/beat"]
                  /lx/tempo/*: ["/remote/tempo/*"]
        """)

        config = load_config(path)

        assert len(config) == 1
        assert config.remotes[0].remap("/lx/tempo/beat") == ["/remote/beat"]

    def test_load_str_path(self, write_config):
        path = write_config("""
            remotes:
              - name: "Console"
        """)

        assert load_config(str(path)).remotes[0].name == "Console"

    def test_missing_file(self, tmp_path):
        """Missing file yields the default config."""
        assert_is_default(load_config(tmp_path / "missing.yaml"))

    def test_empty_file(self, write_config):
        """Empty file yields the default config."""
        assert_is_default(load_config(write_config("")))

    def test_yaml_syntax_error(self, write_config):
        """YAML syntax error yields the default config."""
        path = write_config("remotes: [unclosed\n")

        assert_is_default(load_config(path))

    def test_invalid_utf8_falls_back(self, tmp_path):
        """Undecodable bytes yield the default config instead of raising."""
        path = tmp_path / "bad.yaml"
        path.write_bytes(b'remotes:\n  - name: "\xff\xfe bad"\n')

        assert_is_default(load_config(path))

    def test_env_var_path(self, write_config, monkeypatch):
        path = write_config("""
            remotes:
              - name: "FromEnv"
        """)
        monkeypatch.setenv("OSCREMAP_CONFIG", str(path))

        assert resolve_config_path() == path
        assert load_config().remotes[0].name == "FromEnv"

    def test_argument_beats_env_var(self, write_config, monkeypatch, tmp_path):
        """Explicit path wins over OSCREMAP_CONFIG."""
        monkeypatch.setenv("OSCREMAP_CONFIG", str(tmp_path / "other.yaml"))
        path = write_config("""
            remotes:
              - name: "FromArg"
        """)

        assert load_config(path).remotes[0].name == "FromArg"

    def test_packaged_example(self, monkeypatch):
        """Packaged example config loads with all three remotes."""
        monkeypatch.delenv("OSCREMAP_CONFIG", raising=False)

        assert resolve_config_path() == DEFAULT_CONFIG_PATH
        config = load_config()

        assert [r.name for r in config] == ["Console", "Show Control", "Mirror"]
        assert config.find("Show Control").filter_prefix == "/show/lights/"
        assert config.find("Mirror").is_passthrough
