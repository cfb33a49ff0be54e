import mimetypes
import os
import subprocess
from typing import Optional
import yt_dlp
from videochat.core.providers import AudioExtractor
from videochat.utils.logger import logger

class YtDlpAudioExtractor(AudioExtractor):
    """Pulls an mp3 track out of a remote video (yt-dlp) or an uploaded file (ffmpeg)."""

    def __init__(self, cookies_path: Optional[str] = None, codec: str = "mp3", quality: str = "64"):
        self.cookies_path = cookies_path
        self.codec = codec
        self.quality = quality

    def extract_from_url(self, url: str, work_dir: str, key: str) -> str:
        os.makedirs(work_dir, exist_ok=True)
        logger.info("Downloading audio for speech-to-text...")
        opts = {
            'format': 'bestaudio/best',
            'postprocessors': [{
                'key': 'FFmpegExtractAudio',
                'preferredcodec': self.codec,
                'preferredquality': self.quality,
            }],
            'outtmpl': os.path.join(work_dir, f"{key}.%(ext)s"),
            'quiet': True,
            'no_warnings': True,
        }
        if self.cookies_path:
            opts['cookiefile'] = self.cookies_path
        with yt_dlp.YoutubeDL(opts) as ydl:
            ydl.download([url])
        audio_path = os.path.join(work_dir, f"{key}.{self.codec}")
        if not os.path.exists(audio_path):
            raise FileNotFoundError(f"yt-dlp produced no {self.codec} file for {url}")
        return audio_path

    def extract_from_payload(self, payload: bytes, mime_type: str, work_dir: str, key: str) -> str:
        os.makedirs(work_dir, exist_ok=True)
        ext = mimetypes.guess_extension(mime_type or "") or ".bin"
        source_path = os.path.join(work_dir, f"{key}.source{ext}")
        audio_path = os.path.join(work_dir, f"{key}.{self.codec}")
        with open(source_path, "wb") as f:
            f.write(payload)
        cmd = [
            "ffmpeg",
            "-i", source_path,
            "-vn",
            "-ac", "1",
            "-b:a", f"{self.quality}k",
            "-y",
            audio_path
        ]
        logger.info("Extracting audio track from uploaded video...")
        subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=True)
        return audio_path
