"""SafetyKit CLI: check moderation settings against sample accounts and messages."""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from safetykit import __version__

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """SafetyKit: content and account moderation for chat servers.

    These commands load a YAML file holding the same settings an
    administrator enters in the chat server's console and show what the
    moderation layer would do with them.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load(config_file: str):
    from safetykit.config.loader import load_config_file
    from safetykit.errors import ConfigurationError

    try:
        return load_config_file(config_file)
    except ConfigurationError as e:
        console.print(f"[red]Invalid configuration:[/] {escape(str(e))}")
        sys.exit(1)


# ── Config ───────────────────────────────────────────────────────────


@main.command("check-config")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
def check_config(config_file: str):
    """Validate CONFIG_FILE and summarize the resulting policy."""
    console.print(f"\n[bold blue]SafetyKit[/] checking configuration: {escape(config_file)}\n")

    snapshot = _load(config_file)
    config = snapshot.configuration
    rules = snapshot.rules

    table = Table(title="Moderation Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    def pattern(p):
        return escape(p.pattern) if p is not None else "[dim]off[/]"

    def throttle(enabled: bool, duration: str):
        if not enabled:
            return "[dim]off[/]"
        return "forever" if duration == "-1" else escape(duration)

    table.add_row("Bad words", pattern(rules.bad_words))
    table.add_row("Bad domains", pattern(rules.bad_domains))
    table.add_row("Bad usernames", pattern(rules.bad_usernames))
    table.add_row(
        "Builtin domains",
        f"{len(rules.builtin_domains)} domains" if rules.use_builtin_domains else "[dim]off[/]",
    )
    table.add_row("New user DMs", throttle(config.block_new_user_pm, config.block_new_user_pm_time))
    table.add_row(
        "New user links", throttle(config.block_new_user_links, config.block_new_user_links_time)
    )
    table.add_row(
        "New user images", throttle(config.block_new_user_images, config.block_new_user_images_time)
    )
    table.add_row("Profanity", "reject" if config.reject_posts else f"censor with {config.censor_character!r}")
    table.add_row("Exclude bots", "yes" if config.exclude_bots else "no")
    table.add_row("Admin username", escape(config.admin_username) or "[dim]any administrator[/]")

    console.print(table)
    console.print("\n[green]Valid![/]")


# ── User ─────────────────────────────────────────────────────────────


@main.command("check-user")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--username", "-u", default="", help="Account username")
@click.option("--nickname", "-n", default="", help="Account nickname")
@click.option("--email", "-e", default="", help="Account email address")
def check_user(config_file: str, username: str, nickname: str, email: str):
    """Evaluate the account rules in CONFIG_FILE against a sample account.

    Exits with status 1 when the account would be deactivated.
    """
    from safetykit.rules.validators import evaluate_rules
    from safetykit.users.models import UserSnapshot

    snapshot = _load(config_file)
    user = UserSnapshot(id="cli", username=username, nickname=nickname, email=email)
    report = evaluate_rules(user, snapshot.rules)

    if not report.requires_cleanup:
        console.print("  [green]v[/] Account passes all rules")
        return

    console.print("[red]Account would be deactivated:[/]")
    for violation in report.violations:
        console.print(f"  [red]x[/] {escape(f'[{violation.kind.value}] {violation.detail}')}")
    sys.exit(1)


# ── Message ──────────────────────────────────────────────────────────


@main.command("check-message")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("message")
def check_message(config_file: str, message: str):
    """Show how MESSAGE would be treated under CONFIG_FILE."""
    from safetykit.moderation.models import Post
    from safetykit.moderation.pipeline import censor_message, find_bad_words, render_warning
    from safetykit.moderation.text import contains_images, contains_links, strip_accents

    snapshot = _load(config_file)
    config = snapshot.configuration
    post = Post(user_id="cli", message=message)

    table = Table(title="Message Analysis")
    table.add_column("Check", style="cyan")
    table.add_column("Result")

    words = [m.group(0) for m in find_bad_words(snapshot.rules.bad_words, message)]
    table.add_row("Normalized", escape(strip_accents(message)))
    table.add_row("Bad words", escape(", ".join(words)) if words else "[dim]none[/]")
    table.add_row("Contains links", "yes" if contains_links(post) else "no")
    table.add_row("Contains images", "yes" if contains_images(post) else "no")
    console.print(table)

    if not words:
        console.print("\n[green]Message allowed as written.[/]")
    elif config.reject_posts:
        console.print("\n[red]Rejected:[/] " + escape(render_warning(config.warning_message, words)))
    else:
        censored = censor_message(message, snapshot.rules.bad_words, config.censor_character)
        console.print("\n[yellow]Censored:[/] " + escape(censored))


if __name__ == "__main__":
    main()
