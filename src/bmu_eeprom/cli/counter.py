"""Frame counter ring CLI commands."""

from __future__ import annotations

import json

import click


@click.group()
def counter():
    """Frame counter ring operations."""
    pass


@counter.command("show")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--all", "show_all", is_flag=True, help="List every slot, not just valid ones")
@click.pass_context
def show(ctx: click.Context, file: str, show_all: bool) -> None:
    """List frame counter slots in FILE."""
    from bmu_eeprom.cli.main import handle_errors, make_editor

    editor = make_editor(ctx, file)
    with handle_errors():
        status = editor.counter_status()

    if ctx.obj.get("json_output"):
        click.echo(json.dumps(status.model_dump(), indent=2))
        return

    click.echo(f"{'Pos':>3}  {'Addr':<6}  {'Value':>10}  {'Hex':<8}  Status")
    click.echo("-" * 48)
    for slot in status.slots:
        if not slot.valid and not show_all:
            continue
        is_current = status.current is not None and status.current.index == slot.index
        label = "current" if is_current else ("" if slot.valid else "invalid")
        value = str(slot.value) if slot.valid else "INVALID"
        click.echo(
            f"{slot.index:>3}  0x{slot.address:04X}  {value:>10}  {slot.value:08X}  {label}"
        )
    if status.current is None:
        click.echo("Current: None found")
    else:
        click.echo(f"Current: {status.current.value} (position {status.current.index})")


@counter.command("set")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("value", type=str)
@click.option("--rotate", is_flag=True, help="Advance to the next slot (wear leveling)")
@click.pass_context
def set_value(ctx: click.Context, file: str, value: str, rotate: bool) -> None:
    """Store VALUE (decimal or 0x hex) as the frame counter in FILE."""
    from bmu_eeprom.cli.main import handle_errors, make_editor, parse_int

    try:
        int_value = parse_int(value)
    except ValueError as exc:
        raise click.BadParameter(f"{value!r} is not an integer", param_hint="VALUE") from exc

    if rotate:
        ctx.obj["config"] = ctx.obj["config"].model_copy(update={"wear_leveling": True})
    editor = make_editor(ctx, file)
    with handle_errors():
        slot = editor.set_counter(int_value)
        editor.save_file()
    click.echo(f"Written {int_value} to position {slot}.")
