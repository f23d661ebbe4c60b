"""bmu-eeprom CLI - inspect and edit module controller EEPROM images."""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Iterator

import click

from bmu_eeprom.layout import FormatRevision, MetadataField
from bmu_eeprom.utils.logging import setup_logging


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn library errors into a clean CLI failure."""
    from bmu_eeprom.exceptions import BmuEepromError

    try:
        yield
    except (BmuEepromError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc


def parse_int(value: str) -> int:
    """Parse a decimal or 0x-prefixed hex integer; leading zeros stay decimal."""
    if value.lower().startswith("0x"):
        return int(value, 16)
    return int(value, 10)


def make_editor(ctx: click.Context, path: str | None = None):
    """Build an EepromEditor from the global options, optionally loading ``path``."""
    from bmu_eeprom.core.editor import EepromEditor

    editor = EepromEditor(ctx.obj["config"])
    if path is not None:
        with handle_errors():
            editor.load_file(path)
    return editor


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False),
    default=None, help="JSON editor configuration file",
)
@click.option("--legacy", is_flag=True, help="Use the legacy metadata format")
@click.option("--strict", is_flag=True, help="Verify Intel HEX checksums on load")
@click.pass_context
def cli(
    ctx: click.Context, debug: bool, json_output: bool, config_path: str | None,
    legacy: bool, strict: bool,
) -> None:
    """bmu-eeprom - battery module controller EEPROM tool."""
    from bmu_eeprom.config import EditorConfig, load_config
    from bmu_eeprom.layout import ChecksumMode

    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_output"] = json_output
    setup_logging(level="DEBUG" if debug else "WARNING", json_output=json_output)

    with handle_errors():
        config = load_config(config_path) if config_path else EditorConfig()

    overrides: dict[str, object] = {}
    if legacy:
        overrides["revision"] = FormatRevision.LEGACY
    if strict:
        overrides["checksum_mode"] = ChecksumMode.STRICT
    ctx.obj["config"] = config.model_copy(update=overrides)


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.pass_context
def new(ctx: click.Context, file: str) -> None:
    """Write an erased EEPROM image to FILE."""
    editor = make_editor(ctx)
    with handle_errors():
        editor.save_file(file)
    click.echo(f"Created erased image {file}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def show(ctx: click.Context, file: str) -> None:
    """Show decoded metadata and the current frame counter."""
    editor = make_editor(ctx, file)
    with handle_errors():
        meta = editor.metadata
        current = editor.current_counter

    if ctx.obj.get("json_output"):
        click.echo(json.dumps({
            "revision": str(editor.config.revision),
            "metadata": meta.model_dump(),
            "frame_counter": current.model_dump() if current else None,
        }, indent=2))
        return

    click.echo(f"Metadata ({editor.config.revision}):")
    click.echo(f"  Unique ID: {meta.unique_id:08X}")
    click.echo(f"  Expected Cells: {meta.expected_cell_count}")
    click.echo(f"  Max Charge: {meta.max_charge_current:.2f} A")
    click.echo(f"  Max Discharge: {meta.max_discharge_current:.2f} A")
    click.echo(f"  Count Mismatch: {meta.sequential_count_mismatch}")
    if current is None:
        click.echo("Frame Counter: None found")
    else:
        click.echo(f"Frame Counter: {current.value} (position {current.index})")


@cli.command("set")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--field", "field_name", required=True,
    type=click.Choice([f.value for f in MetadataField]),
)
@click.option("--value", required=True, help="New value (unique_id accepts hex)")
@click.pass_context
def set_field(ctx: click.Context, file: str, field_name: str, value: str) -> None:
    """Change one metadata field in FILE."""
    from bmu_eeprom.models.metadata import FieldEdit

    field = MetadataField(field_name)
    try:
        if field is MetadataField.UNIQUE_ID:
            parsed: int | float = int(value, 16)
        elif field in (MetadataField.MAX_CHARGE_CURRENT, MetadataField.MAX_DISCHARGE_CURRENT):
            parsed = float(value)
        else:
            parsed = parse_int(value)
    except ValueError as exc:
        raise click.BadParameter(f"{value!r} is not a valid {field_name}") from exc

    editor = make_editor(ctx, file)
    with handle_errors():
        editor.apply_edit(FieldEdit(field=field, value=parsed))
        editor.save_file()
    click.echo(f"Set {field_name} = {value} in {file}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def hexdump(ctx: click.Context, file: str) -> None:
    """Print FILE as an address/hex/ASCII dump."""
    editor = make_editor(ctx, file)
    click.echo(editor.hexdump())


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def verify(file: str) -> None:
    """Check every record checksum in FILE."""
    from pathlib import Path

    from bmu_eeprom.codec import ihex
    from bmu_eeprom.layout import ChecksumMode

    with handle_errors():
        text = Path(file).read_text(encoding="ascii", errors="replace")
        ihex.decode(text, checksum_mode=ChecksumMode.STRICT)
    click.echo(f"{file}: OK")


@cli.command()
@click.option("--id", "unique_id", required=True, help="Module controller's ID (hex)")
@click.option("--cells", type=int, required=True, help="# Of battery cells expected")
@click.option("--chargemax", type=float, required=True, help="Max charge current (positive amps)")
@click.option("--dischargemax", type=float, required=True, help="Max discharge current (negative amps)")
@click.option("--cellreset", type=int, required=True, help="Cell reset count (0 to disable)")
@click.option("--file", "file", type=click.Path(dir_okay=False), required=True, help="Output EEPROM filename")
@click.pass_context
def generate(
    ctx: click.Context, unique_id: str, cells: int, chargemax: float,
    dischargemax: float, cellreset: int, file: str,
) -> None:
    """Generate a new EEPROM image for a module controller."""
    from bmu_eeprom.core.generator import generate_image

    try:
        id_value = int(unique_id, 16)
    except ValueError as exc:
        raise click.BadParameter(f"Invalid hex ID {unique_id!r}", param_hint="--id") from exc

    editor = make_editor(ctx)
    if editor.config.revision is not FormatRevision.REVISED:
        raise click.UsageError("generate writes the revised format only; drop --legacy")
    with handle_errors():
        image = generate_image(id_value, cells, chargemax, dischargemax, cellreset)
        editor.load_image(image)
        editor.save_file(file)
    click.echo(f"Wrote {file}")


# Register subcommand groups
from bmu_eeprom.cli.counter import counter  # noqa: E402

cli.add_command(counter)


if __name__ == "__main__":
    cli()
