############################################
############ import statements #############
############################################
import os
import time
from dataclasses import dataclass

import cv2

import config
from log_utils import get_logger

log = get_logger("recorder")

IDLE = "idle"
RECORDING = "recording"


class RecordingError(RuntimeError):
    """A clip could not be opened or written."""


@dataclass
class RecordingSession:
    filename: str
    started_at: float
    fps: float
    frame_size: tuple  # (width, height)
    writer: object
    frames_written: int = 0


############################################
############# helper functions #############
############################################
def resolve_fps(reported, fallback=config.FALLBACK_FPS):
    # some webcams report 0 or -1
    if reported and reported > 0:
        return float(reported)
    return float(fallback)


def clip_filename(started_at, output_dir=config.OUTPUT_DIR):
    return os.path.join(output_dir, f"motion_{int(started_at)}{config.FILE_EXT}")


# open an MJPG writer, raise if OpenCV could not open the file
def open_sink(filename, fps, frame_size):
    fourcc = cv2.VideoWriter_fourcc(*config.CODEC)
    writer = cv2.VideoWriter(filename, fourcc, fps, frame_size, True)
    if not writer.isOpened():
        writer.release()
        raise RecordingError(f"Could not open video writer for {filename}")
    return writer


############################################
############## state machine ###############
############################################
class Recorder:
    """
    Motion-triggered clip recorder.

    idle -> recording   motion, no open clip and now >= cooldown_until
    recording           every frame is written, motion or not
    recording -> idle   more than record_seconds since the clip started;
                        cooldown_until = now + cooldown_seconds

    `now` is time.monotonic(); wall_clock is only used for the clip file name.
    """

    def __init__(self, fps, frame_size, output_dir=config.OUTPUT_DIR,
                 record_seconds=config.RECORD_SECONDS, cooldown_seconds=config.COOLDOWN,
                 sink_factory=open_sink, now=None, wall_clock=time.time):
        self.fps = resolve_fps(fps)
        self.frame_size = (int(frame_size[0]), int(frame_size[1]))
        self.output_dir = output_dir
        self.record_seconds = record_seconds
        self.cooldown_seconds = cooldown_seconds
        self.sink_factory = sink_factory
        self.wall_clock = wall_clock
        self.session = None
        self.cooldown_until = time.monotonic() if now is None else now  # no initial cooldown
        self.clips = []  # filenames of closed clips

    @property
    def recording(self):
        return self.session is not None

    @property
    def state(self):
        return RECORDING if self.recording else IDLE

    def in_cooldown(self, now):
        return now < self.cooldown_until

    def update(self, frame, motion_detected, now):
        """Advance one iteration with the raw frame; returns the new state."""
        if motion_detected and not self.recording and not self.in_cooldown(now):
            self._start(now)

        if self.recording:
            self._write(frame, now)
            if self.recording and now - self.session.started_at > self.record_seconds:
                self._stop(now)

        return self.state

    def close(self, now=None):
        """Close any open clip. Safe to call more than once."""
        if self.recording:
            self._stop(time.monotonic() if now is None else now, reason="shutdown")

    def _start(self, now):
        filename = clip_filename(self.wall_clock(), self.output_dir)
        try:
            writer = self.sink_factory(filename, self.fps, self.frame_size)
        except (RecordingError, cv2.error, OSError) as e:
            # stay idle, the next motion event retries
            log.error(f"Error creating video file {filename}: {e}")
            return
        self.session = RecordingSession(filename, now, self.fps, self.frame_size, writer)
        log.info(f"Recording started: {filename} ({self.fps:.1f} fps, "
                 f"{self.frame_size[0]}x{self.frame_size[1]})")

    def _write(self, frame, now):
        try:
            self.session.writer.write(frame)
        except cv2.error as e:
            filename = self.session.filename
            self._stop(now, reason="write failed")
            raise RecordingError(f"Failed to write frame to {filename}: {e}") from e
        self.session.frames_written += 1

    def _stop(self, now, reason="duration reached"):
        session, self.session = self.session, None
        try:
            session.writer.release()
        finally:
            self.cooldown_until = max(self.cooldown_until, now + self.cooldown_seconds)
            self.clips.append(session.filename)
            log.info(f"Recording stopped ({reason}): {session.filename}, "
                     f"{session.frames_written} frames, "
                     f"cooldown until {self.cooldown_until:.0f}")
