"""Command-line interface for trip_analyze.

Run:
    python -m trip_analyze analyze-trip --csv trace.csv
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

from trip_analyze.classifier import classify_movement
from trip_analyze.compress import compress_trace
from trip_analyze.csv_io import load_acceleration_samples, load_geo_points
from trip_analyze.distance import DistanceParams
from trip_analyze.filtering import FilterParams, filter_location_points
from trip_analyze.inspect import export_route_csv, summarize_trace
from trip_analyze.models import DEFAULT_TZ, ClassificationResult
from trip_analyze.smoothing import analyze_movement_sequence
from trip_analyze.stops import StopParams, format_hhmmss, sum_stops, write_stops_csv
from trip_analyze.timeutils import dt_from_epoch_ms
from trip_analyze.trip import TripParams, analyze_trip


def _cmd_inspect(args: argparse.Namespace) -> int:
    points, csv_summary = load_geo_points(args.csv, args.tz)
    trace = summarize_trace(points)

    print(f"### 轨迹：{args.csv}")
    print(
        f"rows={csv_summary.rows_total}, parsed={csv_summary.rows_parsed}, skipped={csv_summary.rows_skipped}; "
        f"columns={', '.join(csv_summary.fieldnames)}"
    )
    if trace.first_ms is not None and trace.last_ms is not None:
        first = dt_from_epoch_ms(trace.first_ms, args.tz).isoformat(sep=" ")
        last = dt_from_epoch_ms(trace.last_ms, args.tz).isoformat(sep=" ")
        print(f"时间：{first} -> {last}（{format_hhmmss((trace.last_ms - trace.first_ms) / 1000.0)}）")
    if trace.sampling is not None:
        s = trace.sampling
        print(
            f"采样间隔（秒）：median={s.median_s:.1f}, p95={s.p95_s:.1f}, "
            f"min={s.shortest_s:.1f}, max={s.longest_s:.1f}（≈{s.rate_hz:.3f} Hz）"
        )
    if trace.bounds is not None:
        min_lat, min_lon, max_lat, max_lon = trace.bounds
        print(f"范围：lat=[{min_lat:.6f}, {max_lat:.6f}], lon=[{min_lon:.6f}, {max_lon:.6f}]")
    print(
        f"重复时间戳={trace.duplicate_timestamps}，带精度={trace.with_accuracy}，"
        f"疑似GPS异常点={trace.rejected}，原始里程={trace.raw_distance_km:.3f} km"
    )

    if args.json:
        payload = asdict(trace) | {"csv": asdict(csv_summary)}
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _trip_params(args: argparse.Namespace) -> TripParams:
    return TripParams(
        filter=FilterParams(
            max_speed_kmh=args.max_speed_kmh,
            max_acceleration_ms2=args.max_acceleration,
            min_accuracy_m=args.min_accuracy_m,
        ),
        distance=DistanceParams(max_segment_km=args.max_segment_km),
        stops=StopParams(
            min_duration_ms=int(args.min_stop_seconds * 1000),
            max_radius_m=args.stop_radius_m,
            min_confidence=args.min_stop_confidence,
        ),
        near_km=args.near_km,
    )


def _cmd_analyze_trip(args: argparse.Namespace) -> int:
    points, _ = load_geo_points(args.csv, args.tz)
    start = (args.start_lat, args.start_lon) if args.start_lat is not None and args.start_lon is not None else None
    target = (args.target_lat, args.target_lon) if args.target_lat is not None and args.target_lon is not None else None
    report = analyze_trip(points, _trip_params(args), start=start, target_end=target)

    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(f"点数：total={report.total_points}, filtered={report.filtered_points}")
        print(f"距离：{report.distance_km:.3f} km，时长：{format_hhmmss(report.duration_ms / 1000.0)}")
        print(f"平均速度：{report.average_speed_kmh:.1f} km/h")
        total = sum_stops(report.stops)
        print(f"停留点：{total.stops} 个，合计={total.total_hhmmss}")
        for i, s in enumerate(report.stops, start=1):
            start_dt = dt_from_epoch_ms(s.start_ms, args.tz)
            print(
                f"  #{i} {start_dt.isoformat(sep=' ')} {s.duration_minutes:.1f} min "
                f"({s.latitude:.6f}, {s.longitude:.6f}) confidence={s.confidence:.2f}"
            )
        print(f"完成状态：{report.completion_status.value}")

    if args.stops_out:
        write_stops_csv(report.stops, args.stops_out, args.tz)
        print(f"已导出：{args.stops_out}")
    if args.route_out:
        export_route_csv(report.route, args.route_out, args.tz)
        print(f"已导出：{args.route_out}")
    return 0


def _cmd_classify(args: argparse.Namespace) -> int:
    samples, _ = load_acceleration_samples(args.csv)
    window = max(1, int(args.window))
    history: list[ClassificationResult] = []
    rows = []
    for i in range(0, len(samples), window):
        chunk = samples[i : i + window]
        raw = classify_movement(chunk)
        recent = history[-args.history :] if args.history > 0 else []
        smoothed = raw if args.no_smoothing else analyze_movement_sequence(recent, raw)
        history.append(raw)
        rows.append(smoothed)
        if not args.json:
            print(
                f"window={i // window} samples={len(chunk)} type={smoothed.type.value} "
                f"confidence={smoothed.confidence:.2f} raw={raw.type.value}"
            )

    if args.json:
        print(json.dumps([r.to_dict() for r in rows], ensure_ascii=False, indent=2))
    return 0


def _cmd_compress(args: argparse.Namespace) -> int:
    points, _ = load_geo_points(args.csv, args.tz)
    route = points if args.raw else filter_location_points(points)
    compressed = compress_trace(route)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(compressed.to_dict(), f, ensure_ascii=False)
    print(
        f"已导出：{args.out}（{compressed.original_point_count} -> {len(compressed.points)} 点，"
        f"ratio={compressed.compression_ratio:.2f}）"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="trip_analyze")
    p.add_argument("--log-level", type=str, default="WARNING", help="日志级别（DEBUG/INFO/WARNING）")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_ins = sub.add_parser("inspect", help="分析轨迹CSV的时间范围/采样间隔等")
    p_ins.add_argument("--csv", type=str, default="trace.csv", help="输入CSV路径")
    p_ins.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA），默认 UTC")
    p_ins.add_argument("--json", action="store_true", help="额外输出JSON（便于后处理）")
    p_ins.set_defaults(func=_cmd_inspect)

    p_trip = sub.add_parser("analyze-trip", help="过滤GPS异常点，计算里程、停留点与完成状态")
    p_trip.add_argument("--csv", type=str, default="trace.csv", help="输入CSV路径")
    p_trip.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA）")
    p_trip.add_argument("--start-lat", type=float, default=None, help="行程起点纬度（默认取第一个点）")
    p_trip.add_argument("--start-lon", type=float, default=None, help="行程起点经度")
    p_trip.add_argument("--target-lat", type=float, default=None, help="目标终点纬度（可选）")
    p_trip.add_argument("--target-lon", type=float, default=None, help="目标终点经度（可选）")
    p_trip.add_argument("--max-speed-kmh", type=float, default=180.0, help="最大合理速度（km/h）")
    p_trip.add_argument("--max-acceleration", type=float, default=5.0, help="最大合理加速度（m/s²）")
    p_trip.add_argument("--min-accuracy-m", type=float, default=100.0, help="精度差于该值（米）的点将被丢弃")
    p_trip.add_argument(
        "--max-segment-km",
        type=float,
        default=None,
        help="单段距离上限（km），超过视为GPS跳点不计入里程（默认不限制）",
    )
    p_trip.add_argument("--min-stop-seconds", type=float, default=180.0, help="停留点最短时长（秒）")
    p_trip.add_argument("--stop-radius-m", type=float, default=50.0, help="停留点半径（米）")
    p_trip.add_argument("--min-stop-confidence", type=float, default=0.6, help="停留点最低置信度")
    p_trip.add_argument("--near-km", type=float, default=0.1, help="终点距起点/目标小于该值视为完成（km）")
    p_trip.add_argument("--json", action="store_true", help="以JSON输出完整报告")
    p_trip.add_argument("--stops-out", type=str, default=None, help="导出停留点CSV路径（可选）")
    p_trip.add_argument("--route-out", type=str, default=None, help="导出过滤后轨迹CSV路径（可选）")
    p_trip.set_defaults(func=_cmd_analyze_trip)

    p_cls = sub.add_parser("classify", help="按窗口识别运动方式（静止/步行/车辆）")
    p_cls.add_argument("--csv", type=str, default="accel.csv", help="加速度CSV路径（timestamp,x,y,z[,magnitude]）")
    p_cls.add_argument("--window", type=int, default=50, help="每个窗口的样本数")
    p_cls.add_argument("--history", type=int, default=5, help="时间一致性平滑使用的历史窗口数")
    p_cls.add_argument("--no-smoothing", action="store_true", help="关闭时间一致性平滑")
    p_cls.add_argument("--json", action="store_true", help="以JSON输出")
    p_cls.set_defaults(func=_cmd_classify)

    p_cmp = sub.add_parser("compress", help="压缩轨迹（自适应采样 + 差分编码）并导出JSON")
    p_cmp.add_argument("--csv", type=str, default="trace.csv", help="输入CSV路径")
    p_cmp.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA）")
    p_cmp.add_argument("--raw", action="store_true", help="不先过滤GPS异常点")
    p_cmp.add_argument("--out", type=str, default="route.json", help="输出JSON路径")
    p_cmp.set_defaults(func=_cmd_compress)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
