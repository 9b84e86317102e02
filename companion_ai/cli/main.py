"""CLI entry point for the companion AI core."""

import base64
import json
import sys
from pathlib import Path
from typing import List, Optional

import click
import structlog

from .. import __version__
from ..config.settings import settings
from ..core.ai_service import AIService
from ..core.exceptions import CompanionError
from ..core.types import ChatMessage, ProviderConfig
from ..memory.directives import DirectiveStreamFilter, apply_directives
from ..prompts.composer import Preset
from ..providers import registry
from ..utils.logging import setup_logging, silence_logging
from .memory import get_knowledge_store, get_profile_store, memory


logger = structlog.get_logger()


def build_service() -> AIService:
    return AIService(knowledge_store=get_knowledge_store())


def resolve_config(
    provider: Optional[str], model: Optional[str], api_key: Optional[str]
) -> ProviderConfig:
    """Settings-derived provider config with command-line overrides applied."""
    config = settings.provider_config()
    if provider and provider != config.provider:
        # A different provider never inherits the configured model or key
        config = ProviderConfig(
            provider=provider, api_key=settings.api_key_for(provider), model=""
        )
    return ProviderConfig(
        provider=config.provider,
        api_key=api_key if api_key is not None else config.api_key,
        model=model or config.model,
    )


def prompt_context_options(preset: Optional[str], **overrides):
    """Prompt context using the profile's user name when one was learned."""
    user_name = get_profile_store().user_name()
    if user_name:
        overrides.setdefault("user_name", user_name)
    if preset:
        overrides["preset"] = Preset.from_value(preset)
    return settings.prompt_context(**overrides)


def read_input(text: Optional[str]) -> str:
    if text:
        return text
    try:
        user_input = sys.stdin.read().strip()
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        sys.exit(1)
    if not user_input:
        click.echo("Error: No input provided", err=True)
        sys.exit(1)
    return user_input


def load_history(path: Optional[str]) -> List[ChatMessage]:
    if not path:
        return []
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    history = data.get("history", []) if isinstance(data, dict) else data
    return [ChatMessage.from_dict(item) for item in history]


@click.group()
@click.version_option(__version__)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--config", type=click.Path(exists=True), help="Path to configuration file")
@click.pass_context
def cli(ctx, debug: bool, config: Optional[str]):
    """Desktop companion AI: chat, screen tips and persistent memory."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    if config:
        settings.config_file = Path(config)
        settings.reload()

    setup_logging(
        debug=debug,
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        log_file=settings.logging.file_enabled,
        file_rotation_mb=settings.logging.file_rotation_mb,
        file_backup_count=settings.logging.file_backup_count,
    )


@cli.command()
@click.argument("text", required=False)
@click.option("--provider", "-p", help="AI provider to use (openai, anthropic, gemini)")
@click.option("--model", "-m", help="Model to use (provider-specific)")
@click.option("--api-key", help="API key (defaults to settings/environment)")
@click.option("--preset", type=click.Choice(["retro", "cozy"]), help="Persona preset")
@click.option(
    "--history",
    type=click.Path(exists=True),
    help="Path to conversation history JSON file",
)
@click.option("--screen-context", help="Description of what is on screen")
@click.option("--stream/--no-stream", default=True, help="Stream the reply as it arrives")
@click.option("--search", is_flag=True, help="Enable web search where the model supports it")
@click.option("--no-memory", is_flag=True, help="Do not apply memory directives")
@click.option("--json", "json_output", is_flag=True, help="Output result as JSON")
@click.pass_context
def chat(
    ctx,
    text: Optional[str],
    provider: Optional[str],
    model: Optional[str],
    api_key: Optional[str],
    preset: Optional[str],
    history: Optional[str],
    screen_context: Optional[str],
    stream: bool,
    search: bool,
    no_memory: bool,
    json_output: bool,
):
    """
    Chat with the companion persona.

    Examples:
    \b
        companion chat "Shall we play a game?"
        echo "remember I like tea" | companion chat --preset cozy
    """
    if json_output and not ctx.obj.get("debug"):
        silence_logging()

    user_input = read_input(text)
    config = resolve_config(provider, model, api_key)
    service = build_service()

    try:
        messages = load_history(history) + [ChatMessage(role="user", content=user_input)]
        prompt_context = prompt_context_options(preset, screen_context=screen_context)
        web_search = search or settings.ai.web_search

        if stream and not json_output:
            shown = DirectiveStreamFilter() if not no_memory else None

            def echo_fragment(fragment: str):
                click.echo(shown.feed(fragment) if shown else fragment, nl=False)

            reply = service.chat_stream(
                config,
                messages,
                prompt_context,
                on_delta=echo_fragment,
                web_search=web_search,
            )
            click.echo(shown.flush() if shown else "")
        else:
            reply = service.chat(config, messages, prompt_context, web_search=web_search)

        if no_memory:
            visible_text, actions = reply, []
        else:
            result = apply_directives(reply, service.knowledge_store, get_profile_store())
            visible_text, actions = result.visible_text, result.applied_actions

        if json_output:
            click.echo(
                json.dumps(
                    {
                        "response": visible_text,
                        "raw_response": reply,
                        "provider": config.provider,
                        "model": config.model or registry.default_model(config.provider),
                        "memory_actions": actions,
                    },
                    indent=2,
                )
            )
        else:
            if not stream:
                click.echo(visible_text)
            for action in actions:
                click.echo(f"[memory] {action}", err=True)

    except (CompanionError, OSError, ValueError) as e:
        logger.debug("Chat failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        service.close()


@cli.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--provider", "-p", help="AI provider to use")
@click.option("--model", "-m", help="Vision-capable model to use")
@click.option("--api-key", help="API key (defaults to settings/environment)")
@click.option("--preset", type=click.Choice(["retro", "cozy"]), help="Persona preset")
@click.option("--no-memory", is_flag=True, help="Do not apply memory directives")
def analyze(
    image_path: str,
    provider: Optional[str],
    model: Optional[str],
    api_key: Optional[str],
    preset: Optional[str],
    no_memory: bool,
):
    """Get a brief tip about a JPEG screenshot."""
    config = resolve_config(provider, model, api_key)
    service = build_service()

    try:
        base64_image = base64.b64encode(Path(image_path).read_bytes()).decode("ascii")
        tip = service.analyze_screen(config, base64_image, prompt_context_options(preset))

        if not no_memory:
            result = apply_directives(tip, service.knowledge_store, get_profile_store())
            tip = result.visible_text
            for action in result.applied_actions:
                click.echo(f"[memory] {action}", err=True)

        click.echo(tip)
    except (CompanionError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        service.close()


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def providers(json_output: bool):
    """List supported providers and their models."""
    infos = [registry.get_provider_info(name) for name in registry.list_ai_providers()]

    if json_output:
        click.echo(
            json.dumps(
                {
                    info.name: {
                        "name": info.display_name,
                        "models": list(info.model_ids()),
                        "default_model": info.default_model,
                        "search_models": sorted(info.search_models),
                    }
                    for info in infos
                },
                indent=2,
            )
        )
        return

    click.echo("Available AI Providers:")
    for info in infos:
        click.echo(f"\n{info.display_name} ({info.name})")
        for model_info in info.models:
            flags = []
            if model_info.id == info.default_model:
                flags.append("default")
            if info.supports_search(model_info.id):
                flags.append("web search")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            click.echo(f"  - {model_info.id}: {model_info.name}{suffix}")


@cli.command("test-connection")
@click.option("--provider", "-p", help="AI provider to test")
@click.option("--model", "-m", help="Model to test")
@click.option("--api-key", help="API key (defaults to settings/environment)")
def test_connection(provider: Optional[str], model: Optional[str], api_key: Optional[str]):
    """Check that the configured provider accepts the API key."""
    config = resolve_config(provider, model, api_key)
    service = AIService()
    try:
        ok = service.test_connection(config)
    finally:
        service.close()

    if ok:
        click.echo(f"Connection to {config.provider} OK")
    else:
        click.echo(f"Connection to {config.provider} failed", err=True)
        sys.exit(1)


cli.add_command(memory)


if __name__ == "__main__":
    cli()
