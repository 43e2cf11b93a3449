# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""
Shared fixtures: a fake container engine, a recording UI and a populated
build root.
"""
from pathlib import Path
from typing import List, Optional

import pytest

from pkgexport.BUILDERS.build_root import BuildRoot
from pkgexport.GRAPH.package_graph import PackageGraph
from pkgexport.MODELS.build_context import BuildContext, EtcGroupEntry, EtcPasswdEntry
from pkgexport.MODELS.package_ident import PackageIdent
from pkgexport.UTILS.ui import UI

BUSYBOX = "core/busybox-static/1.29.2/20190115014552"
HAB = "core/hab/0.79.1/20190410220617"
GLIBC = "core/glibc/2.27/20190115002733"
REDIS = "core/redis/4.0.14/20190319155852"


class FakeEngine:
    """
    Stands in for the container engine and records every invocation.

    :param image_id: Output of the id query; None means no output.
    :param fail_on: Address whose push or rmi exits with `exit_status`.
    """

    def __init__(self, image_id: Optional[str] = "abc123", fail_on: Optional[str] = None,
                 exit_status: int = 1, build_status: int = 0):
        self.image_id = image_id
        self.fail_on = fail_on
        self.exit_status = exit_status
        self.build_status = build_status
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[str]] = []

    def run(self, args, cwd=None) -> int:
        self.calls.append(list(args))
        self.cwds.append(cwd)
        if args[0] == "build":
            return self.build_status
        if self.fail_on is not None and self.fail_on in args:
            return self.exit_status
        return 0

    def output(self, args, cwd=None) -> str:
        self.calls.append(list(args))
        self.cwds.append(cwd)
        return f"{self.image_id}\n" if self.image_id else ""


class RecordingUI(UI):
    """Keeps progress events instead of printing them."""

    def __init__(self):
        super().__init__(quiet=True)
        self.events = []

    def begin(self, message):
        self.events.append(("begin", message))

    def status(self, status, message):
        self.events.append((status, message))

    def end(self, message):
        self.events.append(("end", message))

    def messages(self, status):
        return [m for s, m in self.events if s == status]


def populate_rootfs(rootfs: Path, idents=(BUSYBOX, HAB, GLIBC, REDIS)):
    """Lay out installed packages and account databases under `rootfs`."""
    for ident in idents:
        pkg = rootfs / "hab" / "pkgs" / ident
        (pkg / "bin").mkdir(parents=True, exist_ok=True)
    (rootfs / "hab/pkgs" / BUSYBOX / "bin" / "sh").write_text("")
    (rootfs / "hab/pkgs" / HAB / "bin" / "hab").write_text("")
    (rootfs / "etc").mkdir(parents=True, exist_ok=True)
    (rootfs / "etc" / "passwd").write_text("root:x:0:0:root:/root:/bin/sh\n")
    (rootfs / "etc" / "group").write_text("root:x:0:\n")


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def ui():
    return RecordingUI()


@pytest.fixture
def build_root(tmp_path):
    """A build root for core/redis with glibc, busybox and hab installed."""
    workdir = tmp_path / "work"
    rootfs = workdir / "rootfs"
    populate_rootfs(rootfs)

    graph = PackageGraph()
    redis, glibc = PackageIdent.parse(REDIS), PackageIdent.parse(GLIBC)
    graph.add(redis, [glibc])
    graph.add(PackageIdent.parse(HAB), [glibc])
    graph.add(PackageIdent.parse(BUSYBOX))

    ctx = BuildContext(
        rootfs=rootfs,
        base_image="scratch",
        env_path="/hab/bin:/bin",
        exposes=[6379, "16379"],
        multi_layer=False,
        primary_svc_ident="core/redis",
        installed_primary_svc_ident=REDIS,
        channel="stable",
        environment={"REDIS_PORT": "6379"},
        users=[EtcPasswdEntry(name="hab", uid=42, gid=42, home="/hab")],
        groups=[EtcGroupEntry(name="hab", gid=42, users=["hab"])],
    )
    return BuildRoot(workdir, ctx, graph)
