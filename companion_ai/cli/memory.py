"""Memory subcommands: inspect and edit the companion's knowledge."""

import sys

import click

from ..config.settings import settings
from ..memory.knowledge import FileKnowledgeBackend, KnowledgeStore
from ..memory.profile import JsonProfileStore


def get_knowledge_store() -> KnowledgeStore:
    return KnowledgeStore(FileKnowledgeBackend(settings.storage.brain_dir))


def get_profile_store() -> JsonProfileStore:
    return JsonProfileStore(settings.storage.profile_path)


@click.group()
def memory():
    """Inspect and edit remembered facts."""


@memory.command("list")
def list_entries():
    """Show everything the companion remembers."""
    entries = get_knowledge_store().entries()
    if not entries:
        click.echo("No memories stored.")
        return
    for entry in entries:
        click.echo(f"- {entry}")


@memory.command()
@click.argument("fact")
def remember(fact: str):
    """Store a new fact."""
    try:
        added = get_knowledge_store().add(fact)
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if added:
        click.echo(f"Remembered: {fact.strip()}")
    else:
        click.echo("Already remembered (or empty).")


@memory.command()
@click.argument("keyword")
def forget(keyword: str):
    """Remove every fact containing KEYWORD."""
    try:
        removed = get_knowledge_store().remove(keyword)
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if removed:
        click.echo(f"Forgot: {keyword.strip()}")
    else:
        click.echo(f"Nothing matched: {keyword.strip()}", err=True)
        sys.exit(1)


@memory.command()
@click.confirmation_option(prompt="Erase all memories?")
def clear():
    """Erase all remembered facts."""
    get_knowledge_store().clear()
    click.echo("Memory cleared.")
