"""Recording pipeline: raw desktop frames piped into an ffmpeg process."""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
import time
from pathlib import Path
from typing import IO

from PIL import Image

from robs.recording_args import (
    CaptureTarget,
    RecordingSettings,
    build_ffmpeg_args,
    format_time,
)

log = logging.getLogger(__name__)

_FINALIZE_TIMEOUT = 10.0
_POLL_INTERVAL = 0.2
_QUEUE_POLL = 0.1
_STDERR_PREVIEW_LINES = 10
_MB = 1024 * 1024


def swap_red_blue(data: bytes | bytearray | memoryview) -> bytes:
    """Swap bytes 0 and 2 of every 4-byte pixel (RGBA <-> BGRA).

    Trailing bytes that do not form a whole pixel are left as they are.
    """
    buf = bytearray(data)
    whole = len(buf) // 4 * 4
    head = buf[:whole]
    head[0::4], head[2::4] = head[2::4], head[0::4]
    buf[:whole] = head
    return bytes(buf)


def scale_frame(
    data: bytes | bytearray | memoryview,
    src_width: int,
    src_height: int,
    dst_width: int,
    dst_height: int,
) -> bytes:
    """Resize a 4-byte-per-pixel frame with bilinear filtering.

    Channels are filtered independently, so the byte order (RGBA or BGRA)
    is preserved. Data too short for the source size is returned unchanged.
    """
    if src_width == dst_width and src_height == dst_height:
        return bytes(data)
    if dst_width <= 0 or dst_height <= 0:
        raise ValueError(f"invalid output size {dst_width}x{dst_height}")
    needed = src_width * src_height * 4
    if src_width <= 0 or src_height <= 0 or len(data) < needed:
        log.warning(
            "[Scale] Failed to create %sx%s image (%s bytes)",
            src_width,
            src_height,
            len(data),
        )
        return bytes(data)
    image = Image.frombytes("RGBA", (src_width, src_height), bytes(data[:needed]))
    bands = [
        band.resize((dst_width, dst_height), Image.Resampling.BILINEAR)
        for band in image.split()
    ]
    return Image.merge("RGBA", bands).tobytes()


class FrameRateLimiter:
    """Lets through at most one event per frame interval."""

    def __init__(self, fps: float) -> None:
        if fps <= 0:
            raise ValueError(f"frame rate must be positive, got {fps}")
        self.interval = 1.0 / fps
        self._last: float | None = None

    def ready(self, now: float | None = None) -> bool:
        """True (and the time is recorded) if a full interval has passed."""
        if now is None:
            now = time.monotonic()
        if self._last is not None and now - self._last < self.interval:
            return False
        self._last = now
        return True


class Recorder:
    """Runs one ffmpeg recording at a time and feeds it frames."""

    def __init__(self, settings: RecordingSettings) -> None:
        self.settings = settings
        self.command: list[str] = ["ffmpeg"]
        self.recording = False
        self.last_recording_path = ""
        self.ffmpeg_output: list[str] = []
        self._process: subprocess.Popen | None = None
        self._frames: queue.Queue | None = None
        self._writer: threading.Thread | None = None
        self._stderr_reader: threading.Thread | None = None
        self._stop = threading.Event()
        self._limiter = FrameRateLimiter(settings.fps)
        self._start_time: float | None = None
        self._frames_sent = 0
        self._frames_written = 0

    @property
    def frames_written(self) -> int:
        """Frames handed to ffmpeg's stdin in the current session."""
        return self._frames_written

    def start(self, target: CaptureTarget, output_path: str | Path) -> None:
        """Start ffmpeg recording ``target`` into ``output_path``."""
        if self.recording:
            raise RuntimeError("a recording is already running")
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.last_recording_path = str(path)

        args = build_ffmpeg_args(self.settings, target, str(path))
        log.info("[Recording] FFmpeg args: %s", args)
        process = subprocess.Popen(
            [*self.command, *args],
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
        log.info("[Recording] FFmpeg started (PID: %s) capturing to %s", process.pid, path)

        self._process = process
        self._stop = threading.Event()
        self._frames_sent = 0
        self._frames_written = 0
        self.ffmpeg_output = []
        self._limiter = FrameRateLimiter(self.settings.fps)

        if target.uses_frame_pipe:
            self._frames = queue.Queue()
            self._writer = threading.Thread(
                target=self._write_frames,
                args=(process.stdin, self._frames, self._stop),
                daemon=True,
            )
            self._writer.start()
        else:
            process.stdin.close()

        self._stderr_reader = threading.Thread(
            target=self._read_stderr, args=(process.stderr,), daemon=True
        )
        self._stderr_reader.start()

        self.recording = True
        self._start_time = time.time()

    def _write_frames(self, stdin: IO[bytes], frames: queue.Queue, stop: threading.Event) -> None:
        total_bytes = 0
        try:
            while not stop.is_set():
                try:
                    frame = frames.get(timeout=_QUEUE_POLL)
                except queue.Empty:
                    continue
                if frame is None:
                    log.info("[DXGI-Record] Channel disconnected, exiting")
                    break
                try:
                    stdin.write(frame)
                    stdin.flush()
                except (OSError, ValueError) as exc:
                    log.error("[DXGI-Record] Failed to write frame to FFmpeg: %s", exc)
                    break
                total_bytes += len(frame)
                self._frames_written += 1
                if self._frames_written % 10 == 0:
                    log.info(
                        "[DXGI-Record] Written %s frames to FFmpeg (%s MB total)",
                        self._frames_written,
                        total_bytes // _MB,
                    )
        finally:
            try:
                stdin.close()
            except OSError:
                pass
            log.info(
                "[DXGI-Record] Writer thread exiting after %s frames (%s MB)",
                self._frames_written,
                total_bytes // _MB,
            )

    def _read_stderr(self, stream: IO[bytes]) -> None:
        reported = False
        with stream:
            for raw in stream:
                if len(self.ffmpeg_output) < _STDERR_PREVIEW_LINES:
                    self.ffmpeg_output.append(raw.decode("utf-8", errors="replace").rstrip("\r\n"))
                if not reported and len(self.ffmpeg_output) == _STDERR_PREVIEW_LINES:
                    print(f"[Recording] FFmpeg output: {'; '.join(self.ffmpeg_output)}")
                    reported = True
        if not reported and self.ffmpeg_output:
            print(f"[Recording] FFmpeg output: {'; '.join(self.ffmpeg_output)}")

    def send_frame(self, rgba_data: bytes, width: int, height: int) -> bool:
        """Queue an RGBA frame for ffmpeg; False if it was not sent.

        Frames arriving faster than the configured rate are dropped. The frame
        is scaled to the output size and converted to BGRA first.
        """
        if not self.recording or self._frames is None:
            return False
        if not self._limiter.ready(time.monotonic()):
            return False

        out_w, out_h = self.settings.output_width, self.settings.output_height
        if width != out_w or height != out_h:
            data = scale_frame(rgba_data, width, height, out_w, out_h)
        else:
            data = bytes(rgba_data)
        bgra = swap_red_blue(data)

        if self._writer is None or not self._writer.is_alive():
            log.error("[DXGI-Record] Channel send failed, stopping recording")
            self.stop()
            return False
        self._frames.put(bgra)
        self._frames_sent += 1
        if self._frames_sent % 30 == 0:
            log.info("[DXGI-Record] Sent %s frames to FFmpeg (%sx%s)", self._frames_sent, out_w, out_h)
        return True

    def stop(self) -> int | None:
        """Finish the recording and return its length in whole seconds."""
        self._stop.set()
        if self._frames is not None:
            self._frames.put(None)
            self._frames = None
        if self._writer is not None:
            self._writer.join()
            self._writer = None

        process, self._process = self._process, None
        if process is not None:
            deadline = time.monotonic() + _FINALIZE_TIMEOUT
            while process.poll() is None:
                if time.monotonic() > deadline:
                    log.warning("[Recording] FFmpeg timeout, forcing kill...")
                    process.kill()
                    process.wait()
                    break
                time.sleep(_POLL_INTERVAL)
            log.info("[Recording] FFmpeg exited with: %s", process.returncode)
        if self._stderr_reader is not None:
            self._stderr_reader.join(timeout=1.0)
            self._stderr_reader = None

        self.recording = False
        elapsed = None
        if self._start_time is not None:
            elapsed = max(0, int(time.time() - self._start_time))
        self._start_time = None
        self._report(elapsed)
        return elapsed

    def _report(self, elapsed: int | None) -> None:
        duration = format_time(elapsed) if elapsed is not None else ""
        path = Path(self.last_recording_path)
        if not self.last_recording_path or not path.exists():
            print(f"[Recording] Stopped ({duration}s) - WARNING: file not found at {path}")
            return
        try:
            size_mb = path.stat().st_size / 1_048_576.0
        except OSError:
            print(f"[Recording] Stopped recording ({duration}s) saved to {path}")
            return
        print(f"[Recording] Stopped - saved to {path} ({duration}s, {size_mb:.2f} MB)")
        if size_mb < 0.01:
            print("[Recording] WARNING: File is very small, may not be playable")