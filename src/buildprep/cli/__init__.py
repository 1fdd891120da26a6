"""CLI package for buildprep.

Inspection commands over the input-resolution layer:
- dockerfile: locate the build file under a source tree
- secrets: resolve secret directories into builder --secret arguments
- auth: select the registry credential for an image
- prefetch-input: rewrite dependency prefetch input for RPM packages
- artifact-tag: compute the tag of a pushed Containerfile artifact
"""

from __future__ import annotations

import click
from rich.markup import escape

from .. import __version__
from ..config import ResolveConfig
from ..constants import (
    CONTAINERFILE_ARTIFACT_TAG_SUFFIX,
    DEBUG_ENV_VAR,
    RHSM_CA_BUNDLE,
    RPM_PACKAGE_TYPE,
)
from ..dockerfile import DockerfileSearchOpts, search_dockerfile
from ..errors import ValidationError
from ..image_ref import containerfile_artifact_tag, get_image_name, is_image_name_valid
from ..logging import get_logger, set_debug
from ..package_input import (
    contains_type,
    find_entitlement_ssl_options,
    inject_rpm_input,
    parse_input,
    render_input,
)
from ..registry_auth import extract_credentials, select_registry_auth, write_auth_config
from ..secret_dirs import resolve_secret_args, secret_build_args
from .utils import cli_errors, console, env_name, err_console

logger = get_logger(__name__)

__all__ = ["cli"]


@click.group()
@click.option("--debug", "-d", is_flag=True, envvar=DEBUG_ENV_VAR, help="Debug logging")
@click.version_option(version=__version__, prog_name="buildprep")
def cli(debug: bool) -> None:
    """buildprep - Resolve and validate container build inputs."""
    if debug:
        set_debug(True)


@cli.command()
@click.option(
    "--source",
    "-s",
    required=True,
    envvar=env_name("dockerfile", "source"),
    help="Directory containing the source code",
)
@click.option(
    "--context",
    "-c",
    default=".",
    show_default=True,
    envvar=env_name("dockerfile", "context"),
    help="Build context directory within the source",
)
@click.option(
    "--containerfile",
    "-f",
    default="",
    envvar=env_name("dockerfile", "containerfile"),
    help="Build file within the source (default: Containerfile, then Dockerfile)",
)
def dockerfile(source: str, context: str, containerfile: str) -> None:
    """Locate the Containerfile/Dockerfile to build."""
    config = ResolveConfig.from_cli(source=source, context=context, containerfile=containerfile)
    opts = DockerfileSearchOpts(
        source_dir=config.source,
        context_dir=config.context,
        dockerfile=config.containerfile,
    )
    with cli_errors():
        path = search_dockerfile(opts)

    if path is None:
        err_console.print(
            f"[yellow]No build file found in source '{escape(config.source)}' "
            f"and context '{escape(config.context)}'[/yellow]"
        )
        return
    console.print(str(path), markup=False)


@cli.command()
@click.argument("specs", nargs=-1, required=True)
def secrets(specs: tuple[str, ...]) -> None:
    """Resolve secret directories into --secret arguments.

    Each SPEC is DIR or src=DIR[,name=ALIAS][,optional=true|false].
    """
    config = ResolveConfig.from_cli(secret_dirs=specs)
    with cli_errors():
        build_secrets = resolve_secret_args(config.secret_dirs)

    if not build_secrets:
        err_console.print("[dim]No secret files found[/dim]")
    for arg in secret_build_args(build_secrets):
        console.print(arg, markup=False)


@cli.command()
@click.argument("image")
@click.option(
    "--authfile",
    type=click.Path(dir_okay=False),
    help="Registry auth file (default: $BUILDPREP_AUTH_FILE or ~/.docker/config.json)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    help="Write an auth file holding only the selected credential",
)
def auth(image: str, authfile: str | None, output: str | None) -> None:
    """Show which registry credential would be used for IMAGE.

    The password is never printed; with --output the selected credential is
    written to a new auth file (mode 0600) for tools that only understand
    registry-wide scopes.
    """
    config = ResolveConfig.from_cli(authfile=authfile)
    with cli_errors():
        image_name = get_image_name(image)
        if not is_image_name_valid(image_name):
            raise ValidationError(f"image name '{image_name}' is invalid")
        registry_auth = select_registry_auth(image, config.resolved_auth_file())
        username, _ = extract_credentials(registry_auth.token)
        if output:
            write_auth_config(registry_auth, output)

    console.print(f"registry: {registry_auth.registry}", markup=False)
    console.print(f"username: {username}", markup=False)


@cli.command("prefetch-input")
@click.argument("input_", metavar="INPUT")
@click.option(
    "--type",
    "package_type",
    default=RPM_PACKAGE_TYPE,
    show_default=True,
    help="Package type to rewrite",
)
@click.option("--ssl-client-key", help="Client key for RPM repositories")
@click.option("--ssl-client-cert", help="Client certificate for RPM repositories")
@click.option("--ssl-ca-bundle", help="CA bundle for RPM repositories")
@click.option(
    "--entitlement-dir",
    type=click.Path(exists=True, file_okay=False),
    help="Take client key and certificate from entitlement *.pem files here",
)
def prefetch_input(
    input_: str,
    package_type: str,
    ssl_client_key: str | None,
    ssl_client_cert: str | None,
    ssl_ca_bundle: str | None,
    entitlement_dir: str | None,
) -> None:
    """Rewrite dependency prefetch INPUT for RPM packages.

    INPUT is JSON or a bare package type. Without packages of the
    requested type it is printed unchanged.
    """
    node = parse_input(input_)
    if not contains_type(node, package_type):
        logger.debug("No %s packages in prefetch input", package_type)
        console.print(render_input(node), markup=False)
        return

    ssl: dict[str, str] | None = None
    with cli_errors():
        if entitlement_dir:
            ssl = find_entitlement_ssl_options(entitlement_dir, ssl_ca_bundle or RHSM_CA_BUNDLE)
        elif ssl_client_key or ssl_client_cert:
            if not (ssl_client_key and ssl_client_cert):
                raise click.UsageError(
                    "--ssl-client-key and --ssl-client-cert must be given together"
                )
            ssl = {"client_key": ssl_client_key, "client_cert": ssl_client_cert}
            if ssl_ca_bundle:
                ssl["ca_bundle"] = ssl_ca_bundle
        node = inject_rpm_input(node, ssl, package_type=package_type)

    console.print(render_input(node), markup=False)


@cli.command("artifact-tag")
@click.argument("digest")
@click.option(
    "--suffix",
    default=CONTAINERFILE_ARTIFACT_TAG_SUFFIX,
    show_default=True,
    help="Tag suffix",
)
def artifact_tag(digest: str, suffix: str) -> None:
    """Compute the Containerfile artifact tag for an image DIGEST."""
    with cli_errors():
        tag = containerfile_artifact_tag(digest, suffix)
    console.print(tag, markup=False)
