"""kvlet command-line interface."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager

import click

from .errors import (
    IncorrectOperands,
    MissingCommand,
    UnknownCommand,
    VCSError,
)
from .store import repository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _CommandGroup(click.Group):
    """Reports every failure as one line on stdout and exits with status 0."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError:
            _fail(ctx, IncorrectOperands())

    def resolve_command(self, ctx, args):
        if args and self.get_command(ctx, args[0]) is None:
            raise UnknownCommand()
        return super().resolve_command(ctx, args)

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError:
            _fail(ctx, IncorrectOperands())
        except VCSError as exc:
            _fail(ctx, exc)


class _OperandsCommand(click.Command):
    """Keeps the raw operand list, ``--`` separators included."""

    def parse_args(self, ctx, args):
        ctx.meta["kvlet.operands"] = list(args)
        return super().parse_args(ctx, args)


def _fail(ctx, exc: VCSError):
    click.echo(str(exc))
    ctx.exit(0)


@contextmanager
def _open(ctx):
    """Open the repository in the working directory; save on success."""
    with repository("disk", path=ctx.obj["workdir"]) as repo:
        yield repo


def _echo_log(entries):
    click.echo("\n".join(entry.format() for entry in entries).rstrip("\n"))


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group(cls=_CommandGroup, invoke_without_command=True)
@click.option("--dir", "-C", "workdir", type=click.Path(file_okay=False),
              envvar="KVLET_DIR", default=".", show_default=True,
              help="Working directory of the repository (or set KVLET_DIR).")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr.")
@click.pass_context
def main(ctx, workdir, verbose):
    """kvlet: a small local version-control system.

    \b
    Quick start:
      kvlet init
      kvlet add notes.txt
      kvlet commit "first"
      kvlet log
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["workdir"] = workdir
    if ctx.invoked_subcommand is None:
        raise MissingCommand()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def init(ctx):
    """Create a repository in the working directory."""
    repo = repository("disk", path=ctx.obj["workdir"], create=True)
    repo.close()


@main.command()
@click.argument("file")
@click.pass_context
def add(ctx, file):
    """Stage FILE for the next commit."""
    with _open(ctx) as repo:
        repo.add(file)


@main.command()
@click.argument("message")
@click.pass_context
def commit(ctx, message):
    """Record the staged changes with MESSAGE."""
    with _open(ctx) as repo:
        repo.commit(message)


@main.command()
@click.argument("file")
@click.pass_context
def rm(ctx, file):
    """Unstage FILE, or stage its removal and delete it."""
    with _open(ctx) as repo:
        repo.rm(file)


@main.command()
@click.pass_context
def log(ctx):
    """Show the current branch's history, newest first."""
    with _open(ctx) as repo:
        _echo_log(repo.log())


@main.command("global-log")
@click.pass_context
def global_log(ctx):
    """Show every commit ever made."""
    with _open(ctx) as repo:
        _echo_log(repo.global_log())


@main.command()
@click.argument("message")
@click.pass_context
def find(ctx, message):
    """Print the ids of commits whose message is exactly MESSAGE."""
    with _open(ctx) as repo:
        for commit_id in repo.find(message):
            click.echo(commit_id)


@main.command()
@click.pass_context
def status(ctx):
    """Show branches and staged changes."""
    with _open(ctx) as repo:
        click.echo(repo.status().format(), nl=False)


@main.command(cls=_OperandsCommand,
              context_settings={"ignore_unknown_options": True})
@click.argument("operands", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def checkout(ctx, operands):
    """Restore files or switch branches.

    \b
      checkout -- FILE           restore FILE from HEAD
      checkout COMMIT -- FILE    restore FILE from COMMIT
      checkout BRANCH            switch to BRANCH
    """
    raw = ctx.meta.get("kvlet.operands", list(operands))
    with _open(ctx) as repo:
        if len(raw) == 2 and raw[0] == "--":
            repo.checkout_file(raw[1])
        elif len(raw) == 3 and raw[1] == "--":
            repo.checkout_file(raw[2], raw[0])
        elif len(raw) == 1 and raw[0] != "--":
            repo.checkout_branch(raw[0])
        else:
            raise IncorrectOperands()


@main.command()
@click.argument("name")
@click.pass_context
def branch(ctx, name):
    """Create branch NAME at the current commit."""
    with _open(ctx) as repo:
        repo.branch(name)


@main.command("rm-branch")
@click.argument("name")
@click.pass_context
def rm_branch(ctx, name):
    """Delete branch NAME (its commits are kept)."""
    with _open(ctx) as repo:
        repo.rm_branch(name)


@main.command()
@click.argument("commit_ref", metavar="COMMIT")
@click.pass_context
def reset(ctx, commit_ref):
    """Move the current branch to COMMIT and check it out."""
    with _open(ctx) as repo:
        repo.reset(commit_ref)


@main.command()
@click.argument("name")
@click.pass_context
def merge(ctx, name):
    """Merge branch NAME into the current branch."""
    with _open(ctx) as repo:
        result = repo.merge(name)
        if result.message:
            click.echo(result.message)
