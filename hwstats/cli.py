"""
hwstats Command Line Interface
Watch live CPU/GPU telemetry, take a single reading, or identify hardware.
"""

import json
import logging
import sys
from datetime import datetime
from typing import Optional

import click

from hwstats import __version__
from hwstats.collectors.hardware_info import get_cpu_info, get_gpu_info
from hwstats.collectors.source import HostTelemetrySource
from hwstats.core.config import SamplerConfig
from hwstats.core.errors import ConfigError
from hwstats.core.schema import Emit, SamplerEvent
from hwstats.sampler.sampler import DEFAULT_INTERVAL_MS, TelemetrySampler


# Configure logging
def setup_logging(verbose: bool = False, level: str = "INFO") -> None:
    level = logging.DEBUG if verbose else getattr(logging, level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def format_event(event: SamplerEvent) -> str:
    """One-line terminal rendering of a sampler event."""
    if isinstance(event, Emit):
        sample = event.sample
        when = datetime.fromtimestamp(sample.timestamp).strftime("%H:%M:%S")
        cpu, gpu = sample.cpu, sample.gpu
        cores = " ".join(f"{u:3d}" for u in getattr(cpu, "core_usage", ()))
        cpu_temp = getattr(cpu, "temp_c", None)
        cpu_temp = f" {cpu_temp}°C" if cpu_temp is not None else ""
        return (
            f"[{when}] CPU {getattr(cpu, 'total_usage', cpu)}%{cpu_temp} "
            f"(cores:{cores}) | GPU {getattr(gpu, 'usage_pct', gpu)}% "
            f"{getattr(gpu, 'temp_c', 0)}°C fan {getattr(gpu, 'fan_speed', 0)}"
        )

    when = datetime.fromtimestamp(event.timestamp).strftime("%H:%M:%S")
    return f"[{when}] ✗ {event.error}"


def _echo_event(event: SamplerEvent, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(event.to_dict()))
    elif isinstance(event, Emit):
        click.echo(format_event(event))
    else:
        click.echo(click.style(format_event(event), fg="red"))


@click.group()
@click.version_option(__version__, prog_name="hwstats")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--config", "-c", "config_path", default=None,
              type=click.Path(dir_okay=False), help="Sampler config YAML")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[str]) -> None:
    """
    hwstats - Hardware Telemetry Sampler

    Polls CPU and GPU utilization every 2 seconds.
    """
    ctx.ensure_object(dict)
    try:
        config = SamplerConfig.from_yaml(config_path)
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="--config")

    setup_logging(verbose, config.log_level)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


@cli.command()
@click.option("--count", "-n", default=None, type=click.IntRange(min=1),
              help="Stop after this many events")
@click.option("--json", "as_json", is_flag=True, help="Print events as JSON lines")
@click.pass_context
def watch(ctx: click.Context, count: Optional[int], as_json: bool) -> None:
    """
    Stream telemetry until interrupted.

    The first reading arrives one interval after start.
    """
    logger = logging.getLogger("hwstats.cli.watch")
    config: SamplerConfig = ctx.obj["config"]

    sampler = TelemetrySampler(HostTelemetrySource(config), interval_ms=DEFAULT_INTERVAL_MS)
    if not as_json:
        click.echo(click.style("═══ Hardware Telemetry ═══ (Ctrl-C to stop)", fg="cyan", bold=True))

    received = 0
    sampler.start()
    try:
        while count is None or received < count:
            event = sampler.channel.get(timeout=0.5)
            if event is None:
                continue
            received += 1
            _echo_event(event, as_json)
    except KeyboardInterrupt:
        logger.debug("Interrupted")
    finally:
        sampler.stop()

    logger.debug(f"Sampler summary: {sampler.get_summary()}")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the event as JSON")
@click.pass_context
def snapshot(ctx: click.Context, as_json: bool) -> None:
    """
    Take a single CPU/GPU reading.

    Exits with status 1 if either query fails.
    """
    config: SamplerConfig = ctx.obj["config"]

    sampler = TelemetrySampler(HostTelemetrySource(config), interval_ms=DEFAULT_INTERVAL_MS)
    event = sampler.tick()
    _echo_event(event, as_json)

    if not isinstance(event, Emit):
        sys.exit(1)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
def info(as_json: bool) -> None:
    """Identify the host CPU and GPU."""
    cpu = get_cpu_info()
    gpu = get_gpu_info()

    if as_json:
        click.echo(json.dumps({"cpu": cpu.to_dict(), "gpu": gpu.to_dict()}, indent=2))
        return

    click.echo(click.style("═══ Hardware ═══", fg="cyan", bold=True))
    click.echo(f"CPU:  {cpu.vendor} {cpu.model} ({cpu.cores} cores / {cpu.threads} threads)")
    click.echo(f"GPU:  {gpu.vendor} {gpu.model}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
