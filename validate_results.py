import argparse, os, re
import statistics as stats
from typing import Dict, List, Any

import cv2

import config

TOL_SEC = 1.0  # clip names carry whole seconds

CLIP_RE = re.compile(r"^motion_(\d+)" + re.escape(config.FILE_EXT) + r"$")

def parse_clip_timestamp(name):
    m = CLIP_RE.match(os.path.basename(name))
    return int(m.group(1)) if m else None

def list_clips(directory):
    if not os.path.isdir(directory):
        raise SystemExit(f"{directory} not found. Record some clips first.")
    clips = []
    for name in os.listdir(directory):
        ts = parse_clip_timestamp(name)
        if ts is not None:
            clips.append((ts, os.path.join(directory, name)))
    return sorted(clips)

def probe_clip(path) -> Dict[str, Any]:
    cap = cv2.VideoCapture(path)
    try:
        if not cap.isOpened():
            return {"readable": False, "frames": 0, "fps": None, "duration": None}
        frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
        fps = cap.get(cv2.CAP_PROP_FPS)
    finally:
        cap.release()
    duration = frames / fps if fps and fps > 0 else None
    return {"readable": True, "frames": frames, "fps": fps, "duration": duration}

def check_spacing(starts: List[int], min_gap, tol_sec=TOL_SEC):
    """Pairs of consecutive clip starts closer than min_gap (minus tolerance)."""
    bad = []
    for prev, cur in zip(starts, starts[1:]):
        if cur - prev + tol_sec < min_gap:
            bad.append((prev, cur))
    return bad

def fmt(x, nd=2, fallback="n/a"):
    if x is None:
        return fallback
    try:
        return f"{x:.{nd}f}"
    except Exception:
        return str(x)

def main(argv=None):
    ap = argparse.ArgumentParser(description="Validate motion clips recorded by motion_detection.py")
    ap.add_argument("--dir", default=config.OUTPUT_DIR, help=f"Clip directory (default: {config.OUTPUT_DIR})")
    ap.add_argument("--record-seconds", type=float, default=config.RECORD_SECONDS,
                    help=f"Clip length used while recording (default: {config.RECORD_SECONDS})")
    ap.add_argument("--cooldown", type=float, default=config.COOLDOWN,
                    help=f"Cooldown used while recording (default: {config.COOLDOWN})")
    ap.add_argument("--tol-sec", type=float, default=TOL_SEC, help=f"Spacing tolerance in seconds (default: {TOL_SEC})")
    ap.add_argument("--stats", action="store_true", help="Print aggregate statistics")
    args = ap.parse_args(argv)

    clips = list_clips(args.dir)

    print("Clip Validation Report")
    print("=" * 80)

    if not clips:
        print("[ERROR] No clips found.")
        return 1

    overall_pass = True
    frames_list, duration_list = [], []

    for ts, path in clips:
        res = probe_clip(path)
        ok = res["readable"] and res["frames"] > 0
        print(f"- {path}")
        print(
            f"  start={ts}  frames={res['frames']}  "
            f"fps_nominal={fmt(res['fps'], 2)}  duration_s={fmt(res['duration'], 2)}  PASS={ok}"
        )
        if not ok:
            overall_pass = False
            continue
        frames_list.append(res["frames"])
        if res["duration"] is not None:
            duration_list.append(res["duration"])

    # clip starts must be at least one clip plus one cooldown apart
    min_gap = args.record_seconds + args.cooldown
    too_close = check_spacing([ts for ts, _ in clips], min_gap, args.tol_sec)
    for prev, cur in too_close:
        print(f"[WARN] Clips at {prev} and {cur} are {cur - prev}s apart (min {fmt(min_gap, 1)}s)")
        overall_pass = False

    print("=" * 80)

    if args.stats:
        def mean_sd(a):
            if not a:
                return ("n/a", "n/a")
            if len(a) == 1:
                return (fmt(a[0], 2), "n/a")
            return (fmt(stats.mean(a), 2), fmt(stats.pstdev(a), 2))

        m_frames, sd_frames = mean_sd(frames_list)
        m_dur, sd_dur = mean_sd(duration_list)

        print("Aggregate Statistics")
        print(f"  Clips:           {len(clips)}")
        print(f"  Frames per clip: mean={m_frames}  sd={sd_frames}")
        print(f"  Duration (s):    mean={m_dur}  sd={sd_dur}")
        print("-" * 80)

    status = "PASS" if overall_pass else "CHECK FAILURES ABOVE"
    print("OVERALL:", status)
    return 0 if overall_pass else 1

if __name__ == "__main__":
    raise SystemExit(main())
