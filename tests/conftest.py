"""Pytest fixtures shared by the oscremap tests.

Provides:
- console_data: Parsed config with a literal + wildcard remote and a mirror remote
- write_config: Factory writing YAML text to a temp file and returning its path
"""

import textwrap

import pytest


@pytest.fixture
def console_data():
    """Generic config data as yaml.safe_load would return it."""
    return {
        "remotes": [
            {
                "name": "Console",
                "ip": "10.0.0.5",
                "port": 9000,
                "mappings": {
                    "/lx/tempo/beat": ["/remote/beat"],
                    "/lx/tempo/*": ["/remote/tempo/*"],
                },
            },
            {
                "name": "Mirror",
                "ip": "10.0.0.6",
                "port": 9001,
                "mappings": {
                    "/lx/tempo/beat": ["/lx/tempo/beat"],
                },
            },
        ]
    }


@pytest.fixture
def write_config(tmp_path):
    """Fixture returning a writer for temporary YAML config files.

    Example:
        def test_load(write_config):
            path = write_config('''
                remotes:
                  - name: Console
            ''')
    """
    def _write(text: str, name: str = "remapper_config.yaml"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(text))
        return path

    return _write
