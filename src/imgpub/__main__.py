"""Main entrypoints for the `publish` and `publish-tags` commands."""
from pathlib import Path
from typing import Optional

import click
import toml
from cattrs.errors import BaseValidationError
from rich.table import Table

from imgpub.core.config import Config, load_config
from imgpub.core.errors import PublishError
from imgpub.core.execute import execute_plan
from imgpub.core.metadata import UnknownSource, candidate_tags, detect_source
from imgpub.core.plan import ActionState, Plan, generate_plan
from imgpub.core.request import PublishRequest
from imgpub.core.runtime import ContainerRuntime
from imgpub.docker.runtime import DockerRuntime
from imgpub.utils import CONSOLE, error, log, print_waiting, warning

DEFAULT_CONFIG_PATH = "./publish.toml"


def print_plan(plan: Plan):
    """Prints the state of every action of a plan as a table."""
    table = Table(title="Publish")
    table.add_column("#", justify="right")
    table.add_column("Type", justify="right")
    table.add_column("Target")
    table.add_column("State", justify="right")
    table.add_column("Error", justify="right")

    for idx, action in enumerate(plan.actions):
        match action.state:
            case ActionState.PLANNED:
                state = "planned"

            case ActionState.IN_PROGRESS:
                state = "[cyan] in progress"

            case ActionState.FAILED:
                state = "[red] failed"

            case ActionState.DONE:
                state = "[green] done"

            case ActionState.CANCELLED:
                state = "[dim] cancelled"

            case _:
                raise ValueError(f"unknown state {action.state}")

        table.add_row(
            str(idx),
            action.type.name,
            action.target,
            state,
            "" if action.error is None else action.error,
        )

    CONSOLE.print(table)


@click.command()
@click.argument("artifact_path", required=True)
@click.argument("base_repository", required=True)
@click.argument("base_tag", required=True)
@click.argument("tag_list", metavar="TAGS", required=True)
@click.pass_context
def publish(
    ctx: click.Context,
    artifact_path: str,
    base_repository: str,
    base_tag: str,
    tag_list: str,
):
    """Loads the image at ARTIFACT_PATH as BASE_REPOSITORY:BASE_TAG, tags it
    with every reference in the comma separated TAGS and pushes all the tags of
    BASE_REPOSITORY."""
    try:
        request = PublishRequest.from_args(artifact_path, base_repository, base_tag, tag_list)

    except ValueError as exc:
        raise click.UsageError(str(exc), ctx=ctx) from exc

    for dest in request.external_destinations:
        warning(f"{dest} is outside {request.base.repository} and will not be pushed")

    publish_plan = generate_plan(request)

    try:
        runtime = ctx.obj if isinstance(ctx.obj, ContainerRuntime) else DockerRuntime.from_env()

        with print_waiting(f"publishing {request.base}"):
            for publish_plan in execute_plan(runtime, request, publish_plan):
                pass

    except PublishError as exc:
        if not publish_plan.with_state(ActionState.FAILED):
            error(str(exc))

        print_plan(publish_plan)
        ctx.exit(exc.exit_code)

    print_plan(publish_plan)
    log(f"published {len(request.destinations)} tags from {request.base}")


@click.command()
@click.option("-c", "--config", "config_path", default=None, help="Path to the TOML config.")
@click.option("--image", envvar="IMAGE_NAME", default=None, help="Image name without the tag.")
@click.option("--ref", envvar="GITHUB_REF", default=None, help="Fully qualified git ref.")
@click.option("--sha", envvar="GITHUB_SHA", default=None, help="Commit SHA being built.")
@click.option("--repo", "repo_path", default=".", help="Path to the git repository.")
@click.option("--sep", default=",", help="Separator between the printed references.")
@click.pass_context
def tags(
    ctx: click.Context,
    config_path: Optional[str],
    image: Optional[str],
    ref: Optional[str],
    sha: Optional[str],
    repo_path: str,
    sep: str,
):
    """Prints the references an image built from the current source should be
    published as."""
    config = _load_tags_config(ctx, config_path)

    image_name = image or config.image.name
    if not image_name:
        raise click.UsageError("the image name is not configured, use --image", ctx=ctx)

    try:
        source = detect_source(repo_path, ref=ref or None, sha=sha or None)

    except UnknownSource as exc:
        raise click.ClickException(f"cannot determine the source: {exc}") from exc

    log(f"generating tags for {source.ref.kind.name.lower()} {source.ref.name} sha={source.sha}")

    click.echo(sep.join(candidate_tags(image_name, config.tags, source)))


def _load_tags_config(ctx: click.Context, config_path: Optional[str]) -> Config:
    if config_path is None:
        if not Path(DEFAULT_CONFIG_PATH).exists():
            return Config()

        config_path = DEFAULT_CONFIG_PATH

    try:
        return load_config(path=config_path)

    except (OSError, toml.TomlDecodeError, BaseValidationError, ValueError) as exc:
        raise click.UsageError(f"invalid config {config_path}: {exc}", ctx=ctx) from exc


if __name__ == "__main__":
    publish()  # pylint: disable=no-value-for-parameter
