"""Command line interface.

``ai-shell generate <prompt>``
    Print a shell command for a natural language request.

``ai-shell explain <command>``
    Print a short explanation of a shell command.

``ai-shell configure``
    Set the default provider and/or one provider's credentials.

``ai-shell show-config`` / ``ai-shell config-path``
    Inspect the stored configuration (API keys masked).

Both ``generate`` and ``explain`` accept ``--provider`` to switch backend
for one call and ``--model`` to override the model or deployment.
"""

import asyncio
import json
import sys

import click

from shellhow.config.models import ProviderId
from shellhow.config.store import ConfigStore
from shellhow.core.orchestrator import CommandOutcome, Orchestrator, OutcomeStatus
from shellhow.logging.audit import redact_secret, setup_logging

PROVIDER_CHOICE = click.Choice([p.value for p in ProviderId])


async def _run(operation: str, text: str, provider: str | None, model: str | None) -> CommandOutcome:
    orchestrator = Orchestrator.from_store(ConfigStore())
    try:
        if operation == "generate":
            return await orchestrator.generate_command(text, provider=provider, model=model)
        return await orchestrator.explain_command(text, provider=provider, model=model)
    finally:
        await orchestrator.aclose()


def _join(words: tuple[str, ...], what: str) -> str:
    text = " ".join(words).strip()
    if not text:
        raise click.UsageError(f"{what} cannot be empty")
    return text


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """Translate natural language into shell commands and explain commands."""
    setup_logging()


@cli.command()
@click.argument("prompt", nargs=-1, required=True)
@click.option("-p", "--provider", type=PROVIDER_CHOICE, default=None, help="Provider for this call.")
@click.option("-m", "--model", default=None, help="Model or deployment override.")
def generate(prompt: tuple[str, ...], provider: str | None, model: str | None) -> None:
    """Generate a shell command from a natural language PROMPT."""
    outcome = asyncio.run(_run("generate", _join(prompt, "Prompt"), provider, model))
    if outcome.status is OutcomeStatus.ERROR:
        click.echo(f"LLM error ({outcome.provider}): {outcome.error}", err=True)
        sys.exit(1)
    if outcome.status is OutcomeStatus.EMPTY:
        click.echo(f"Could not generate command: {outcome.content or 'no response received.'}", err=True)
        sys.exit(1)
    click.echo(outcome.content)


@cli.command()
@click.argument("command", nargs=-1, required=True)
@click.option("-p", "--provider", type=PROVIDER_CHOICE, default=None, help="Provider for this call.")
@click.option("-m", "--model", default=None, help="Model or deployment override.")
def explain(command: tuple[str, ...], provider: str | None, model: str | None) -> None:
    """Explain a shell COMMAND."""
    outcome = asyncio.run(_run("explain", _join(command, "Command"), provider, model))
    if outcome.status is OutcomeStatus.ERROR:
        click.echo(f"LLM error ({outcome.provider}): {outcome.error}", err=True)
        sys.exit(1)
    if outcome.status is OutcomeStatus.EMPTY:
        click.echo("No explanation received from LLM.", err=True)
        sys.exit(1)
    click.echo(outcome.content)


@cli.command()
@click.option("--default-provider", type=PROVIDER_CHOICE, default=None, help="Provider used when none is given.")
@click.option("--provider", type=PROVIDER_CHOICE, default=None, help="Provider whose settings to update.")
@click.option("--api-key", default=None)
@click.option("--base-url", default=None, help="API base URL or Azure endpoint.")
@click.option("--model", default=None, help="Model name or Azure deployment.")
@click.option("--api-version", default=None, help="Azure API version.")
def configure(default_provider, provider, api_key, base_url, model, api_version) -> None:
    """Update the stored provider configuration."""
    updates = {"api_key": api_key, "base_url": base_url, "model": model, "api_version": api_version}
    has_updates = any(v is not None for v in updates.values())
    if has_updates and provider is None:
        raise click.UsageError("--provider is required when updating provider settings")
    if not has_updates and default_provider is None:
        raise click.UsageError("Nothing to configure. See --help.")

    store = ConfigStore()
    ok = True
    if default_provider:
        ok = store.set_default_provider(default_provider) and ok
    if has_updates:
        ok = store.update_provider_config(provider, **updates) and ok

    if not ok:
        click.echo("Failed to save configuration.", err=True)
        sys.exit(1)
    click.echo(f"Configuration saved to {store.get_config_file_path()}")


@cli.command(name="show-config")
def show_config() -> None:
    """Print the effective configuration with API keys masked."""
    document = ConfigStore().load_config().to_dict()
    for block in document["providers"].values():
        if "apiKey" in block:
            block["apiKey"] = redact_secret(block["apiKey"])
    click.echo(json.dumps(document, indent=2))


@cli.command(name="config-path")
def config_path() -> None:
    """Print the path of the configuration file."""
    click.echo(str(ConfigStore().get_config_file_path()))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
