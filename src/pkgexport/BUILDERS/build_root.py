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
Staging directory holding a populated root filesystem and its context.
"""
import shutil
from pathlib import Path

from ..GRAPH.package_graph import PackageGraph
from ..MODELS.build_context import BuildContext
from ..MODELS.manifest import BuildManifest
from ..MODELS.package_ident import PackageIdent, version_sort_key
from ..UTILS.ui import UI, Status
from ..errors import PackageNotFound


class BuildRoot:
    """
    A work directory whose `rootfs` subdirectory has already been populated
    with package payloads.
    """

    def __init__(self, workdir, ctx: BuildContext, graph: PackageGraph):
        """
        Args:
            workdir: Directory used as the image build context.
            ctx: Context describing the root filesystem inside `workdir`.
            graph: Dependency graph of every installed package.
        """
        self._workdir = Path(workdir)
        self._ctx = ctx
        self._graph = graph

    def workdir(self) -> Path:
        return self._workdir

    def ctx(self) -> BuildContext:
        return self._ctx

    def graph(self) -> PackageGraph:
        return self._graph

    def destroy(self, ui: UI):
        """
        Removes the work directory. Removing an already-missing directory is
        not an error.
        """
        ui.status(Status.DESTROYING, f"temporary files in {self._workdir}")
        if self._workdir.exists():
            shutil.rmtree(self._workdir)

    @classmethod
    def from_manifest(cls, manifest: BuildManifest) -> "BuildRoot":
        """
        Creates a build root from a loaded manifest.

        When the manifest omits the installed primary service ident, it is
        taken from the newest listed package matching the primary ident.
        """
        graph = PackageGraph()
        for entry in manifest.packages:
            graph.add(PackageIdent.parse(entry.ident), [PackageIdent.parse(d) for d in entry.deps])

        primary = PackageIdent.parse(manifest.primary_svc_ident)
        if manifest.installed_primary_svc_ident:
            installed = PackageIdent.parse(manifest.installed_primary_svc_ident)
        else:
            installed = _installed_ident(primary, graph)

        ctx = BuildContext(
            rootfs=manifest.workdir / manifest.rootfs,
            base_image=manifest.base_image,
            env_path=manifest.env_path,
            exposes=manifest.exposes,
            multi_layer=manifest.multi_layer,
            primary_svc_ident=primary,
            installed_primary_svc_ident=installed,
            channel=manifest.channel,
            environment=manifest.environment,
            users=manifest.users,
            groups=manifest.groups,
            bin_path=manifest.bin_path,
        )
        return cls(manifest.workdir, ctx, graph)


def _installed_ident(primary: PackageIdent, graph: PackageGraph) -> PackageIdent:
    matches = [
        ident for ident in graph.reverse_topological_sort()
        if ident.fully_qualified and ident.satisfies(primary)
    ]
    if not matches:
        raise PackageNotFound(str(primary))
    return max(matches, key=lambda ident: (version_sort_key(ident.version), ident.release))
