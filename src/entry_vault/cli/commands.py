import click
import shlex
import logging
from datetime import datetime, timezone
from functools import wraps

from entry_vault.config import LOG_FORMAT, NOT_FOUND_TITLE, idle_timeout_from_env, log_level_from_env
from entry_vault.core.errors import VaultError
from entry_vault.core.selector import FieldSelector
from entry_vault.core.store import EntryStore
from entry_vault.cli.session import Session

MASK = '********'

FIXED_FIELDS = {
    'id': FieldSelector.ID,
    'title': FieldSelector.TITLE,
    'url': FieldSelector.URL,
    'username': FieldSelector.USERNAME,
    'password': FieldSelector.PASSWORD,
}


class AppState:
    """The store handle and session shared by every command of one process."""

    def __init__(self, store: EntryStore, session: Session):
        self.store = store
        self.session = session
        self.in_shell = False

    @classmethod
    def create(cls) -> 'AppState':
        store = EntryStore.with_defaults(idle_timeout=idle_timeout_from_env())
        session = Session(store.idle_timeout)
        session.unlock()
        return cls(store, session)


class FieldSelectorType(click.ParamType):
    """Accepts a fixed field name or the integer id of a dynamic field."""
    name = 'field'

    def convert(self, value, param, ctx):
        if isinstance(value, FieldSelector):
            return value
        key = str(value).strip().lower()
        if key in FIXED_FIELDS:
            return FIXED_FIELDS[key]
        try:
            return FieldSelector.dynamic(int(key))
        except ValueError:
            self.fail(f"{value!r} is not one of {', '.join(FIXED_FIELDS)} or a dynamic field id.", param, ctx)


FIELD = FieldSelectorType()


def format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')


def vault_errors(f):
    """Decorator turning store errors into click errors."""
    @wraps(f)
    def wrapped(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except VaultError as e:
            raise click.ClickException(str(e))
    return wrapped


def require_entry(store: EntryStore, entry_id: int):
    entry = store.get_by_id(entry_id)
    if entry.title == NOT_FOUND_TITLE:
        raise click.ClickException(f"Entry {entry_id} not found.")
    return entry


def can_reveal(state: AppState, reveal: bool) -> bool:
    if reveal and not state.session.is_valid():
        click.echo("Vault is locked. Run 'unlock' to reveal secrets.")
        return False
    return reveal


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging.')
@click.pass_context
def cli(ctx, verbose):
    """Entry Vault CLI

    Keeps credential entries whose username, password and custom fields
    remember every previous value. Use the commands below to list, add,
    edit and inspect entries and their history.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if ctx.obj is None:
        ctx.obj = AppState.create()
    ctx.obj.session.refresh()


pass_state = click.make_pass_decorator(AppState)


@cli.command()
@pass_state
def ls(state):
    """List all entries, newest first."""
    items = state.store.list_entries()
    if not items:
        click.echo("No entries.")
        return
    for item in items:
        click.echo(f"  {item.id}: {item.title}")


@cli.command()
@pass_state
@click.argument('title')
def add(state, title):
    """Add a new entry with the given title."""
    new_id = state.store.add(title)
    click.echo(f"Entry '{title}' added with ID: {new_id}")


@cli.command()
@pass_state
@click.argument('entry_id', type=int)
@click.option('--reveal', is_flag=True, help='Show the password instead of a mask.')
def show(state, entry_id, reveal):
    """Show the current values of an entry."""
    store = state.store
    entry = require_entry(store, entry_id)
    reveal = can_reveal(state, reveal)
    click.echo(f"Title: {entry.title}")
    click.echo(f"Url: {entry.url}")
    click.echo(f"Username: {store.current(entry_id, FieldSelector.USERNAME)}")
    password = store.current(entry_id, FieldSelector.PASSWORD)
    click.echo(f"Password: {password if reveal else MASK}")
    for selector in store.dynamic_fields(entry_id):
        name = store.field_name(entry_id, selector)
        click.echo(f"[{selector.field_id}] {name}: {store.current(entry_id, selector)}")


@cli.command()
@pass_state
@click.argument('entry_id', type=int)
@click.argument('field', type=FIELD)
@click.argument('value')
@vault_errors
def edit(state, entry_id, field, value):
    """Change a field. Username, password and custom fields keep their old values."""
    store = state.store
    if not store.edit_field(entry_id, field, value):
        raise click.ClickException(f"Entry {entry_id} has no field {field}.")
    click.echo(f"Updated {store.field_name(entry_id, field)} of entry {entry_id}.")


@cli.command()
@pass_state
@click.argument('entry_id', type=int)
@click.argument('field', type=FIELD)
@click.option('--reveal', is_flag=True, help='Show password versions instead of a mask.')
@vault_errors
def history(state, entry_id, field, reveal):
    """Show every version of a field, newest first."""
    store = state.store
    require_entry(store, entry_id)
    if field.is_dynamic and field not in store.dynamic_fields(entry_id):
        raise click.ClickException(f"Entry {entry_id} has no field {field}.")
    name = store.field_name(entry_id, field)
    versions = store.history(entry_id, field)
    if versions is None:
        click.echo(f"{name} has no history.")
        return
    masked = field == FieldSelector.PASSWORD and not can_reveal(state, reveal)
    click.echo(f"{name} history:")
    for n, (timestamp, value) in enumerate(versions):
        click.echo(f"  {n}: {format_timestamp(timestamp)}  {MASK if masked else value}")


@cli.command(name='add-field')
@pass_state
@click.argument('entry_id', type=int)
@click.argument('name')
def add_field(state, entry_id, name):
    """Add a custom field to an entry."""
    selector = state.store.add_field(entry_id, name)
    if selector is None:
        raise click.ClickException(f"Entry {entry_id} not found.")
    click.echo(f"Field '{name}' added to entry {entry_id} with ID: {selector.field_id}")


@cli.command(name='rename-field')
@pass_state
@click.argument('entry_id', type=int)
@click.argument('field_id', type=int)
@click.argument('name')
@vault_errors
def rename_field(state, entry_id, field_id, name):
    """Rename a custom field. Its history is kept."""
    if not state.store.rename_field(entry_id, FieldSelector.dynamic(field_id), name):
        raise click.ClickException(f"Entry {entry_id} has no field {field_id}.")
    click.echo(f"Field {field_id} of entry {entry_id} renamed to '{name}'.")


@cli.command()
@pass_state
@click.argument('seconds', type=int, required=False)
def timeout(state, seconds):
    """Show or set the idle timeout in seconds."""
    if seconds is None:
        click.echo(f"Idle timeout: {state.store.idle_timeout} seconds")
        return
    try:
        state.store.set_idle_timeout(seconds)
    except ValueError as e:
        raise click.ClickException(str(e))
    state.session.timeout_seconds = state.store.idle_timeout
    click.echo(f"Idle timeout set to {seconds} seconds.")


@cli.command()
@pass_state
def lock(state):
    """Hide secrets until the next unlock."""
    state.session.lock()
    click.echo("Vault locked.")


@cli.command()
@pass_state
def unlock(state):
    """Allow secrets to be revealed again."""
    state.session.unlock()
    click.echo("Vault unlocked.")


@cli.command()
@pass_state
def shell(state):
    """Run commands interactively against one store. Type 'exit' to leave."""
    if state.in_shell:
        raise click.ClickException("Already inside the shell.")
    state.in_shell = True
    try:
        while True:
            try:
                line = click.prompt('vault', prompt_suffix='> ', default='', show_default=False)
            except click.Abort:
                break
            line = line.strip()
            if not line:
                continue
            if line in ('exit', 'quit'):
                break
            try:
                args = shlex.split(line)
            except ValueError as e:
                click.echo(f"Error: {str(e)}")
                continue
            try:
                cli.main(args, prog_name='vault', standalone_mode=False, obj=state)
            except click.ClickException as e:
                e.show()
            except click.Abort:
                break
    finally:
        state.in_shell = False
    click.echo("Bye.")


def main():
    logging.basicConfig(format=LOG_FORMAT, level=log_level_from_env())
    cli()


if __name__ == '__main__':
    main()
