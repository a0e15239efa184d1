#!/usr/bin/env python3
"""
hwstats - Log Telemetry Script
==============================
Example script that subscribes to a sampler and appends every reading to a
CSV file for a fixed duration.

Usage:
    python log_telemetry.py --output telemetry.csv --duration 60

© 2026 Sudheer Ibrahim Daniel Devu. All Rights Reserved.
"""

import argparse
import csv
import sys
import threading
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(
        description="Record CPU/GPU telemetry to CSV"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="telemetry.csv",
        help="CSV file to append to"
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Seconds to record"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to sampler config YAML"
    )

    args = parser.parse_args()

    if args.duration <= 0:
        print("Error: --duration must be positive")
        sys.exit(1)

    try:
        from hwstats import HostTelemetrySource, SamplerConfig, TelemetrySampler
        from hwstats.core.schema import Emit
    except ImportError as e:
        print(f"Error: hwstats not installed: {e}")
        print("Install with: pip install -e .")
        sys.exit(1)

    config = SamplerConfig.from_yaml(args.config)
    output = Path(args.output)
    write_header = not output.exists()

    done = threading.Event()
    counts = {"emit": 0, "fail": 0}

    with open(output, "a", newline="") as f:
        writer = csv.writer(f)
        if write_header:
            writer.writerow(["timestamp", "cpu_total", "cpu_temp", "gpu_usage", "gpu_temp", "gpu_fan", "error"])

        def on_event(event):
            counts[event.kind] += 1
            if isinstance(event, Emit):
                s = event.sample
                writer.writerow([
                    s.timestamp, s.cpu.total_usage, "" if s.cpu.temp_c is None else s.cpu.temp_c,
                    s.gpu.usage_pct, s.gpu.temp_c, s.gpu.fan_speed, "",
                ])
            else:
                writer.writerow([event.timestamp, "", "", "", "", "", str(event.error)])

        sampler = TelemetrySampler(HostTelemetrySource(config))
        sampler.channel.buffered = False
        sampler.channel.subscribe(on_event)

        print(f"Recording telemetry to {output} for {args.duration:.0f}s...")
        with sampler:
            try:
                done.wait(args.duration)
            except KeyboardInterrupt:
                pass

    print(f"Wrote {counts['emit']} samples ({counts['fail']} failed ticks)")


if __name__ == "__main__":
    main()
