from __future__ import annotations

import argparse
import csv
import math
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Final

# 1 degree of latitude along a meridian, for a 6371 km sphere.
KM_PER_DEG_LAT: Final[float] = 6371.0 * math.pi / 180.0


@dataclass(frozen=True, slots=True)
class Leg:
    """Straight drive north at constant speed."""

    seconds: float
    speed_kmh: float


def generate_trace(
    *,
    seed: int,
    start_ms: int,
    start_lat: float,
    start_lon: float,
    legs: list[Leg],
    stop_seconds: float,
    step_seconds: float = 30.0,
    outlier_every: int = 0,
) -> list[dict[str, str]]:
    """Generate trace rows: drive the legs with a stop between each pair.

    Every ``outlier_every``-th row (0 = never) is replaced by a GPS jump ~50 km away.
    """

    rng = random.Random(seed)
    rows: list[dict[str, str]] = []
    t = start_ms
    lat = start_lat

    def emit(cur_lat: float, cur_lon: float, acc: float) -> None:
        rows.append(
            {
                "timestamp": str(int(t)),
                "latitude": f"{cur_lat:.7f}",
                "longitude": f"{cur_lon:.7f}",
                "accuracy": f"{acc:.1f}",
                "speed": "",
                "heading": "0.0",
            }
        )

    for i, leg in enumerate(legs):
        steps = max(1, int(leg.seconds // step_seconds))
        step_deg = leg.speed_kmh * step_seconds / 3600.0 / KM_PER_DEG_LAT
        for _ in range(steps):
            emit(lat, start_lon + rng.uniform(-2e-6, 2e-6), rng.choice([4.0, 6.0, 10.0, 15.0]))
            lat += step_deg
            t += step_seconds * 1000
        if i < len(legs) - 1:
            # Dwell with small jitter, one sample per minute.
            stop_end = t + stop_seconds * 1000
            while t < stop_end:
                emit(lat + rng.uniform(-2e-5, 2e-5), start_lon + rng.uniform(-2e-5, 2e-5), 8.0)
                t += 60_000
    emit(lat, start_lon, 5.0)

    if outlier_every > 0:
        for k in range(outlier_every, len(rows) - 1, outlier_every):
            rows[k]["latitude"] = f"{float(rows[k]['latitude']) + 0.45:.7f}"
    return rows


def generate_accel(*, seed: int, seconds: float, rate_hz: float, freq_hz: float, amplitude: float) -> list[dict[str, str]]:
    """Generate linear-acceleration rows: a vertical oscillation plus noise."""

    rng = random.Random(seed)
    n = int(seconds * rate_hz)
    out = []
    for k in range(n):
        t_s = k / rate_hz
        y = amplitude * math.sin(2 * math.pi * freq_hz * t_s + 0.3) + rng.gauss(0.0, amplitude * 0.02)
        x = rng.gauss(0.0, 0.02)
        z = rng.gauss(0.0, 0.02)
        out.append(
            {
                "timestamp": f"{t_s * 1000:.1f}",
                "x": f"{x:.4f}",
                "y": f"{y:.4f}",
                "z": f"{z:.4f}",
            }
        )
    return out


def _write(path: Path, rows: list[dict[str, str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake trip trace and accelerometer CSV for demo/testing.")
    p.add_argument("--out", type=str, default="sample_data/trace.csv", help="Output trace CSV path")
    p.add_argument("--accel-out", type=str, default="sample_data/accel.csv", help="Output accelerometer CSV path")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument("--stop-minutes", type=float, default=5.0, help="Length of each stop between legs")
    p.add_argument("--outlier-every", type=int, default=25, help="Insert a GPS jump every N rows (0 = never)")
    p.add_argument(
        "--motion",
        type=str,
        default="walking",
        choices=["stationary", "walking", "vehicle"],
        help="Kind of accelerometer signal to generate",
    )
    args = p.parse_args()

    rows = generate_trace(
        seed=args.seed,
        start_ms=1_735_718_400_000,  # 2025-01-01 08:00:00 UTC
        start_lat=25.2048,
        start_lon=55.2708,
        legs=[Leg(seconds=600, speed_kmh=30.0), Leg(seconds=900, speed_kmh=45.0), Leg(seconds=300, speed_kmh=20.0)],
        stop_seconds=args.stop_minutes * 60,
        outlier_every=args.outlier_every,
    )
    out_path = Path(args.out)
    _write(out_path, rows)

    freq, amp = {"stationary": (0.0, 0.0), "walking": (2.0, 3.0), "vehicle": (0.6, 3.5)}[args.motion]
    accel = generate_accel(seed=args.seed, seconds=30.0, rate_hz=20.0, freq_hz=freq, amplitude=amp)
    accel_path = Path(args.accel_out)
    _write(accel_path, accel)

    print(f"Generated: {out_path} (rows={len(rows)}), {accel_path} (rows={len(accel)}, motion={args.motion})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
