############################################
############ import statements #############
############################################
import argparse
import os
import sys
import time

import cv2

import config
from detector import MotionDetector
from log_utils import get_logger
from recorder import Recorder, RecordingError

log = get_logger("motion_detection")


############################################
############# helper functions #############
############################################
# device index ("0") or a video file path
def parse_source(value):
    return int(value) if str(value).isdigit() else value


# regular files end; cameras and device nodes (/dev/video0) only fail transiently
def is_file_source(source):
    return isinstance(source, str) and os.path.isfile(source)


# draw boxes and label on the display frame
def annotate(frame, regions):
    for x, y, w, h in regions:
        cv2.rectangle(frame, (x, y), (x + w, y + h), config.BOX_COLOR, 2)
        cv2.putText(frame, config.LABEL, config.LABEL_POS, cv2.FONT_HERSHEY_PLAIN,
                    1.5, config.LABEL_COLOR, 2)
    return frame


# ui key window close and so on
def ui_step(frame, win=config.WINDOW_NAME):
    cv2.imshow(win, frame)
    key = cv2.waitKey(1) & 0xFF
    window_gone = cv2.getWindowProperty(win, cv2.WND_PROP_VISIBLE) < 1
    if key == config.EXIT_KEY or window_gone:
        return "quit"
    return None


# frame size and fps, captured once at startup
def capture_properties(cap):
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    fps = cap.get(cv2.CAP_PROP_FPS)
    return width, height, fps


############################################
################ main loop #################
############################################
def run(cap, detector, recorder, show=True, stop_on_end=False, clock=time.monotonic):
    """
    One iteration per frame until ESC, window close or (stop_on_end) the end
    of the stream. Any open clip is closed on the way out.
    """
    frames = 0
    try:
        while True:
            ret, frame = cap.read()
            if not ret or frame is None or frame.size == 0:
                if stop_on_end:
                    log.info("End of stream")
                    break
                log.debug("No frame from source, retrying")
                continue

            now = clock()
            frames += 1

            try:
                motion_detected, regions = detector.update(frame)
            except cv2.error as e:
                log.warning(f"Skipping frame {frames}: {e}")
                continue

            try:
                recorder.update(frame, motion_detected, now)
            except RecordingError as e:
                log.error(str(e))

            if show:
                frame_out = annotate(frame.copy(), regions)
                if ui_step(frame_out) == "quit":
                    log.info("Exit requested")
                    break
    finally:
        recorder.close(clock())
    return frames


def build_parser():
    ap = argparse.ArgumentParser(description="Record short clips when motion is detected")
    ap.add_argument("--source", default=str(config.SOURCE),
                    help=f"Camera index or video file (default: {config.SOURCE})")
    ap.add_argument("--output-dir", default=config.OUTPUT_DIR,
                    help=f"Existing directory for clips (default: {config.OUTPUT_DIR})")
    ap.add_argument("--min-area", type=float, default=config.MIN_CONTOUR_AREA,
                    help=f"Minimum contour area in pixels (default: {config.MIN_CONTOUR_AREA})")
    ap.add_argument("--record-seconds", type=float, default=config.RECORD_SECONDS,
                    help=f"Clip length in seconds (default: {config.RECORD_SECONDS})")
    ap.add_argument("--cooldown", type=float, default=config.COOLDOWN,
                    help=f"Seconds after a clip before the next may start (default: {config.COOLDOWN})")
    ap.add_argument("--no-display", action="store_true", help="Run without a preview window")
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    source = parse_source(args.source)

    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        log.error(f"Error opening video source: {source}")
        cap.release()
        return 1

    show = not args.no_display
    try:
        width, height, fps = capture_properties(cap)
        detector = MotionDetector(min_area=args.min_area)
        recorder = Recorder(fps, (width, height), output_dir=args.output_dir,
                            record_seconds=args.record_seconds, cooldown_seconds=args.cooldown)
        log.info(f"Start reading {source} ({width}x{height} @ {recorder.fps:.1f} fps)")
        try:
            run(cap, detector, recorder, show=show, stop_on_end=is_file_source(source))
        except KeyboardInterrupt:
            log.info("Interrupted")
        log.info(f"Clips recorded: {len(recorder.clips)}")
    finally:
        cap.release()
        if show:
            cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    sys.exit(main())
