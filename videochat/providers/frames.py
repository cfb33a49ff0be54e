import mimetypes
import os
import shutil
import subprocess
from typing import List, Tuple
from videochat.core.providers import FrameSampler
from videochat.errors import InvalidReference
from videochat.utils.logger import logger


class FfmpegFrameSampler(FrameSampler):
    """Samples one JPEG every ``interval`` seconds from an uploaded video.

    Everything is written under ``<work_dir>/<key>/`` and removed before
    ``sample`` returns or raises.
    """

    def __init__(self, work_dir: str, interval: float = 10.0, max_frames: int = 20):
        self.work_dir = work_dir
        self.interval = interval
        self.max_frames = max_frames

    def sample(self, payload: bytes, mime_type: str, key: str) -> List[Tuple[float, bytes]]:
        frame_dir = os.path.join(self.work_dir, key)
        os.makedirs(frame_dir, exist_ok=True)
        try:
            ext = mimetypes.guess_extension(mime_type or "") or ".bin"
            source_path = os.path.join(frame_dir, f"source{ext}")
            with open(source_path, "wb") as f:
                f.write(payload)
            cmd = [
                "ffmpeg",
                "-i", source_path,
                "-vf", f"fps=1/{self.interval:g}",
                "-frames:v", str(self.max_frames),
                "-q:v", "4",
                "-y",
                os.path.join(frame_dir, "frame_%04d.jpg")
            ]
            logger.info(f"Sampling up to {self.max_frames} frames every {self.interval:g}s...")
            try:
                subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=True)
            except subprocess.CalledProcessError as e:
                logger.error(f"ffmpeg failed: {e.stderr.decode('utf-8', 'replace')[-500:] if e.stderr else e}")
                raise InvalidReference("Could not read frames from the uploaded video") from e

            names = sorted(n for n in os.listdir(frame_dir) if n.startswith("frame_") and n.endswith(".jpg"))
            if not names:
                raise InvalidReference("The uploaded video contains no readable frames")
            frames = []
            for i, name in enumerate(names):
                with open(os.path.join(frame_dir, name), "rb") as f:
                    frames.append((i * self.interval, f.read()))
            return frames
        finally:
            shutil.rmtree(frame_dir, ignore_errors=True)
