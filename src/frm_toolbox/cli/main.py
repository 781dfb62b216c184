"""CLI entry point — click group that registers each tool's sub-command."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from frm_toolbox.core.config import ConfigManager
from frm_toolbox.core.exceptions import FrmToolboxError
from frm_toolbox.tools.frm_converter.layout import Generator


@click.group()
@click.version_option(package_name="frm-toolbox")
@click.option("-V", "--verbose", is_flag=True, default=False, help="Print debug messages (layout math, file writes).")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, resolve_path=True),
    default=None,
    help="Configuration directory (default: ~/.config/frm-toolbox).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_dir: str | None) -> None:
    """FRM Toolbox — convert Fallout .frm sprites to PNG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="> %(name)s: %(message)s",
    )
    config = ConfigManager(config_dir=Path(config_dir) if config_dir else None)
    config.load()
    ctx.obj = config


@cli.command(name="convert")
@click.argument("frm", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option(
    "-p",
    "--pal",
    "palette",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    default=None,
    help="Palette file (default: 'palette' config key).",
)
@click.option(
    "-g",
    "--generator",
    default=None,
    type=click.Choice([g.value for g in Generator]),
    help="Output strategy (default: 'generator' config key, else legacy).",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, resolve_path=True),
    default=None,
    help="Output PNG (default: <frm stem>.png next to the input).",
)
@click.option("-m", "--multiplier", "rgb_multiplier", type=click.IntRange(1, 4), default=None, help="RGB multiplier.")
@click.option("--spacing", type=click.IntRange(min=0), default=None, help="Gap between directions (anim-packed).")
@click.pass_obj
def convert_cmd(
    config: ConfigManager,
    frm: str,
    palette: str | None,
    generator: str | None,
    output_path: str | None,
    rgb_multiplier: int | None,
    spacing: int | None,
) -> None:
    """Convert an .frm sprite into a PNG sheet or animated PNG files.

    The 'anim' generator writes one file per direction, suffixed _0, _1, ...
    """
    from frm_toolbox.core.events import PROGRESS, EventBus
    from frm_toolbox.tools.frm_converter import FrmConverterTool

    bus = EventBus()
    bus.subscribe(PROGRESS, lambda **kw: click.echo(f"  [{kw['current']:3d}/{kw['total']:3d}] {kw['message']}"))

    tool = FrmConverterTool(event_bus=bus, config=config)
    try:
        result = tool.run(
            params={
                "input": Path(frm),
                "output": Path(output_path) if output_path else None,
                "palette": Path(palette) if palette else None,
                "generator": generator,
                "rgb_multiplier": rgb_multiplier,
                "spacing": spacing,
            },
        )
    except FrmToolboxError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(
        f"Converted {Path(frm).name} with '{result.generator}' "
        f"({result.directions} directions x {result.frames_per_direction} frames) "
        f"into {result.count} file(s)"
    )


@cli.command(name="info")
@click.argument("frm", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
def info_cmd(frm: str) -> None:
    """Print the header of an .frm sprite."""
    from frm_toolbox.core.events import LOG, EventBus
    from frm_toolbox.tools.frm_info import FrmInfoTool

    bus = EventBus()
    bus.subscribe(LOG, lambda **kw: click.echo(kw["message"]))

    tool = FrmInfoTool(event_bus=bus)
    try:
        tool.run(params={"input": Path(frm)})
    except FrmToolboxError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command(name="tools")
def tools_cmd() -> None:
    """List the available tools and their parameters."""
    from frm_toolbox.core.registry import ToolRegistry

    registry = ToolRegistry()
    registry.discover()

    for tool in registry.all_tools().values():
        click.echo(f"{tool.display_name} ({tool.name} {tool.version}) — {tool.description}")
        for param in tool.define_parameters():
            default = "required" if param.required else f"default: {param.default}"
            click.echo(f"    {param.name:<16} {default:<20} {param.help}")
