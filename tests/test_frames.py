"""Tests for frame sampling of uploaded videos via ffmpeg (mocked)."""

import os
import subprocess
from unittest.mock import patch

import pytest

from videochat.errors import InvalidReference
from videochat.providers.frames import FfmpegFrameSampler


def write_frames(count):
    def run(cmd, **kwargs):
        out_dir = os.path.dirname(cmd[-1])
        for i in range(1, count + 1):
            with open(os.path.join(out_dir, f"frame_{i:04d}.jpg"), "wb") as f:
                f.write(f"jpeg {i}".encode())
    return run


class TestFfmpegFrameSampler:
    @patch("videochat.providers.frames.subprocess.run")
    def test_frames_are_timed_by_interval(self, run, tmp_path):
        run.side_effect = write_frames(3)
        sampler = FfmpegFrameSampler(str(tmp_path), interval=5, max_frames=3)

        frames = sampler.sample(b"video bytes", "video/mp4", "upload_x")

        assert frames == [(0.0, b"jpeg 1"), (5.0, b"jpeg 2"), (10.0, b"jpeg 3")]
        cmd = run.call_args.args[0]
        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-vf") + 1] == "fps=1/5"
        assert cmd[cmd.index("-frames:v") + 1] == "3"
        assert os.path.basename(cmd[cmd.index("-i") + 1]) == "source.mp4"
        assert not os.path.exists(tmp_path / "upload_x")

    @patch("videochat.providers.frames.subprocess.run")
    def test_unreadable_video(self, run, tmp_path):
        run.side_effect = subprocess.CalledProcessError(1, ["ffmpeg"], stderr=b"moov atom not found")

        with pytest.raises(InvalidReference):
            FfmpegFrameSampler(str(tmp_path)).sample(b"garbage", "video/mp4", "upload_x")
        assert not os.path.exists(tmp_path / "upload_x")

    @patch("videochat.providers.frames.subprocess.run")
    def test_no_frames_produced(self, run, tmp_path):
        run.side_effect = write_frames(0)

        with pytest.raises(InvalidReference):
            FfmpegFrameSampler(str(tmp_path)).sample(b"audio only", "video/webm", "upload_y")
        assert not os.path.exists(tmp_path / "upload_y")
