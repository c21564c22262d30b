"""CLI for browsing remote repository file trees."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import click
from pydantic import ValidationError

from ghcontents import GitHubClient

from .config import Settings, load_settings
from .errors import RepoTreeError
from .models import DirectoryNode, Node
from .registry import CapabilityRegistry
from .service import FileTreeService
from .source import GitHubListingSource, ListingSource

logger = logging.getLogger(__name__)


def setup_logging(verbose: int) -> None:
    """Setup logging."""
    level = logging.DEBUG if verbose >= 2 else logging.INFO if verbose == 1 else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@contextmanager
def cli_errors() -> Iterator[None]:
    """Report repotree failures as click errors instead of tracebacks."""
    try:
        yield
    except (RepoTreeError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(str(e)) from e


def render_tree(nodes: list[Node], prefix: str = "") -> Iterator[str]:
    """Yield text lines drawing ``nodes`` with box connectors."""
    for i, node in enumerate(nodes):
        last = i == len(nodes) - 1
        connector = "└── " if last else "├── "
        if isinstance(node, DirectoryNode):
            yield f"{prefix}{connector}{node.name}/"
            yield from render_tree(list(node.children), prefix + ("    " if last else "│   "))
        else:
            size = f" ({node.size} bytes)" if node.size is not None else ""
            yield f"{prefix}{connector}{node.name}{size}"


def get_source(ctx: click.Context) -> ListingSource:
    """Return the listing source, creating the GitHub one on first use."""
    obj = ctx.obj
    if "source" not in obj:
        settings: Settings = obj["settings"]
        if not settings.owner:
            raise click.UsageError("Repository owner required: use --owner or set REPOTREE_OWNER")
        client = GitHubClient(
            token=obj.get("token"),
            use_gh_cli=obj.get("use_gh_cli", False),
            max_retries=obj.get("retries", 3),
        )
        obj["source"] = GitHubListingSource(client, settings.owner, ref=settings.ref)
    return obj["source"]


def get_service(ctx: click.Context, settings: Settings | None = None) -> FileTreeService:
    settings = settings or ctx.obj["settings"]
    return FileTreeService(
        get_source(ctx),
        limits=settings.limits,
        concurrency=settings.concurrency,
    )


# ============ CLI Group ============

@click.group()
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--use-gh-cli", is_flag=True, help="Use gh cli credentials")
@click.option("--owner", help="Repository owner (default: REPOTREE_OWNER)")
@click.option("--ref", help="Branch, tag or commit (default: repository default branch)")
@click.option("--retries", "-r", type=int, default=3, help="Retry attempts")
@click.option("-v", "--verbose", count=True, help="Verbosity (-v, -vv)")
@click.pass_context
def cli(
    ctx: click.Context,
    token: str | None,
    use_gh_cli: bool,
    owner: str | None,
    ref: str | None,
    retries: int,
    verbose: int,
) -> None:
    """Browse GitHub repositories as file trees."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    if "settings" not in ctx.obj:
        try:
            ctx.obj["settings"] = load_settings()
        except ValidationError as e:
            raise click.UsageError(f"Invalid REPOTREE_* setting: {e}") from e
    updates = {key: value for key, value in (("owner", owner), ("ref", ref)) if value}
    if updates:
        ctx.obj["settings"] = ctx.obj["settings"].model_copy(update=updates)
    ctx.obj.update(token=token, use_gh_cli=use_gh_cli, retries=retries)


# ============ Commands ============

@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def repos(ctx, as_json):
    """List repositories of the owner."""
    with cli_errors():
        result = get_service(ctx).list_repositories()

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return
    for repo in result.repositories:
        visibility = "private" if repo.is_private else "public"
        click.echo(f"{repo.name}  [{repo.language}, {visibility}, ★{repo.stars}, forks {repo.forks}]")
        if repo.description:
            click.echo(f"    {repo.description}")
    click.echo(f"\n{result.total} repositories")


@cli.command()
@click.argument("repository")
@click.argument("path", default="")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def ls(ctx, repository, path, as_json):
    """List one directory of REPOSITORY (root by default)."""
    with cli_errors():
        listing = get_service(ctx).list_files_in_directory(repository, path)

    if as_json:
        click.echo(listing.model_dump_json(indent=2))
        return
    for entry in listing.entries:
        if entry.is_directory:
            click.echo(f"{entry.name}/")
        else:
            size = "" if entry.size is None else f"  {entry.size}"
            click.echo(f"{entry.name}{size}")


@cli.command()
@click.argument("repository")
@click.option("--max-depth", type=int, help="Deepest directory level to list")
@click.option("--max-entries", type=int, help="Maximum number of entries")
@click.option("-j", "--concurrency", type=int, help="Parallel directory listings")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def tree(ctx, repository, max_depth, max_entries, concurrency, as_json):
    """Fetch the whole file tree of REPOSITORY."""
    settings: Settings = ctx.obj["settings"]
    updates = {
        key: value
        for key, value in (
            ("max_depth", max_depth),
            ("max_entries", max_entries),
            ("concurrency", concurrency),
        )
        if value is not None
    }
    with cli_errors():
        settings = Settings(**{**settings.model_dump(), **updates})
        file_tree = get_service(ctx, settings).list_files_tree(repository)

    if as_json:
        click.echo(file_tree.model_dump_json(indent=2))
        return
    click.echo(f"{file_tree.repository}/")
    for line in render_tree(file_tree.nodes):
        click.echo(line)
    click.echo(f"\n{file_tree.total_entries} entries, {file_tree.total_files} files")
    if file_tree.truncated:
        click.echo("Tree truncated by depth or entry limits", err=True)
    for path in file_tree.failed_paths:
        click.echo(f"Could not list: {path}", err=True)


@cli.command()
@click.argument("repository")
@click.argument("path")
@click.pass_context
def cat(ctx, repository, path):
    """Print the content of a file in REPOSITORY."""
    with cli_errors():
        content = get_service(ctx).read_file_content(repository, path)
    click.echo(content, nl=not content.endswith("\n"))


@cli.command()
@click.pass_context
def capabilities(ctx):
    """List the registered capabilities."""
    registry = CapabilityRegistry.for_service(get_service(ctx))
    for name in registry.names():
        click.echo(name)


if __name__ == "__main__":
    cli()
