"""Fixtures for end-to-end tests against a real configuration tree."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from modfiles.config import Config
from modfiles.terminus import ModuleFiles


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A config directory with modules, nodes and file server rules.

    modules/ntp/files/{ntp.conf, conf.d/extra.conf}
    modules/ntp/manifest.txt     (module file outside files/)
    testing/ntp/files/ntp.conf   (testing environment copy)
    secret.txt                   (outside every module)
    """
    files = tmp_path / "modules" / "ntp" / "files"
    (files / "conf.d").mkdir(parents=True)
    (files / "ntp.conf").write_text("server pool.ntp.org\n")
    (files / "conf.d" / "extra.conf").write_text("driftfile x\n")
    (tmp_path / "modules" / "ntp" / "manifest.txt").write_text("class ntp {}\n")
    (tmp_path / "testing" / "ntp" / "files").mkdir(parents=True)
    (tmp_path / "testing" / "ntp" / "files" / "ntp.conf").write_text(
        "server test.ntp.org\n"
    )
    (tmp_path / "secret.txt").write_text("do not serve\n")

    (tmp_path / "modfiles.yaml").write_text(
        textwrap.dedent(
            """\
            environment: ""
            modulepath: [modules]
            environments:
              testing:
                modulepath: [testing]
            nodes_file: nodes.yaml
            fileserver_config: fileserver.yaml
            """
        )
    )
    (tmp_path / "nodes.yaml").write_text(
        textwrap.dedent(
            """\
            nodes:
              web01.example.com:
                environment: testing
              db01.example.com: {}
            """
        )
    )
    (tmp_path / "fileserver.yaml").write_text(
        textwrap.dedent(
            """\
            default_effect: deny
            rules:
              - mounts: [modules]
                nodes: ["*.example.com"]
                effect: allow
              - mounts: [modules]
                ips: [192.168.0.0/16]
                effect: allow
            """
        )
    )
    return tmp_path


@pytest.fixture
def int_terminus(site: Path) -> ModuleFiles:
    """A terminus built from the site's modfiles.yaml."""
    return ModuleFiles.from_config(Config.load(str(site / "modfiles.yaml")))
