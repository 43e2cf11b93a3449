"""
Command Line Interface for pkgexport.
"""
import logging
import click
from pydantic import ValidationError

from ..config import ExportSettings
from ..BUILDERS.build_root import BuildRoot
from ..BUILDERS.docker_build_root import DockerBuildRoot, TargetPlatform
from ..MODELS.build_context import Credentials
from ..MODELS.manifest import BuildManifest
from ..NAMING.naming import Naming
from ..UTILS.engine import Engine, docker_cmd
from ..UTILS.ui import UI
from ..errors import ExportError, ManifestError

@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log engine invocations')
@click.option('--quiet', '-q', is_flag=True, help='Suppress progress output')
@click.pass_context
def cli(ctx, verbose, quiet):
    """
    pkgexport - build container images from installed packages.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj['settings'] = ExportSettings.from_env()
    ctx.obj['ui'] = UI(quiet=quiet)

@cli.command()
@click.argument('manifest', type=click.Path(exists=True, dir_okay=False))
@click.option('--platform', type=click.Choice([p.value for p in TargetPlatform]), default=None,
              help='Target platform (defaults to the host)')
@click.option('--memory', '-m', default=None, help='Memory limit for the build, e.g. 2g')
@click.option('--push', 'push_image', is_flag=True, help='Push every tag to the registry')
@click.option('--registry-url', '-R', default=None, help='Registry to push to')
@click.option('--token', '-U', default=None, help='Registry auth token')
@click.option('--rm-image', is_flag=True, help='Remove the local image afterwards')
@click.option('--report-dir', type=click.Path(file_okay=False), default=None,
              help='Directory for the build report')
@click.option('--cleanup', is_flag=True, help='Delete the build root afterwards')
@click.pass_context
def export(ctx, manifest, platform, memory, push_image, registry_url, token, rm_image, report_dir, cleanup):
    """Build an image from a prepared build root manifest."""
    settings = ctx.obj['settings']
    ui = ctx.obj['ui']

    token = token or settings.registry_token
    if push_image and not token:
        raise click.UsageError("--push requires --token or PKGEXPORT_REGISTRY_TOKEN")

    try:
        loaded = BuildManifest.load(manifest)
        try:
            naming = Naming(**loaded.naming)
        except ValidationError as e:
            raise ManifestError(f"Invalid naming in {manifest}: {e}") from e

        build_root = BuildRoot.from_manifest(loaded)
        root = DockerBuildRoot.from_build_root(build_root, ui, platform)
        engine = Engine(docker_cmd(settings))
        image = root.export(ui, naming, memory or settings.memory, engine=engine)

        if report_dir:
            image.create_report(ui, report_dir)
        if push_image:
            image.push(ui, Credentials(token=token), registry_url or settings.registry_url)
        if rm_image:
            image.rm(ui)
        if cleanup:
            root.destroy(ui)
    except (ExportError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(image.id)

def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
