"""Content acquisition for images, videos and text-bearing files."""

import re
import subprocess
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

import pymupdf
from pydantic import BaseModel, Field

from airenamer.errors import NoExtractableContentError, UnsupportedFileError


class ContentKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    TEXT = "text"


class ExtractedFrames(BaseModel):
    """Frames sampled from a video, plus a description used in the prompt."""

    images: list[Path] = Field(default_factory=list)
    video_summary: str | None = None


class ContentSource(ABC):
    """Base class for content sources.

    A content source decides how a file is presented to the model: as images, as
    video frames with a summary, or as extracted text.
    """

    @abstractmethod
    def detect_kind(self, path: Path) -> ContentKind:
        """Classify the file.

        Raises:
            UnsupportedFileError: If the file cannot be handled at all.
        """
        pass

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Extract text from the file.

        Raises:
            UnsupportedFileError: If the file format cannot be read.
            NoExtractableContentError: If the file holds no usable text.
        """
        pass

    @abstractmethod
    def extract_frames(self, path: Path, output_dir: Path, frames: int) -> ExtractedFrames:
        """Write `frames` still images from the video into `output_dir`."""
        pass


class FileContentSource(ContentSource):
    """Content source that decides by file extension and sniffs text files for binary data.

    PDF-family documents are read with PyMuPDF, videos are sampled with ffmpeg, and
    everything else is decoded as UTF-8 text.
    """

    IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff", ".heic"}
    VIDEO_EXTENSIONS = {".mp4", ".mov", ".m4v", ".avi", ".mkv", ".webm", ".wmv", ".flv", ".mpg", ".mpeg"}
    DOCUMENT_EXTENSIONS = {".pdf", ".epub", ".xps", ".oxps", ".fb2", ".mobi", ".cbz"}

    SNIFF_BYTES = 8192
    MAX_READ_BYTES = 2_000_000
    PRINTABLE_RUN_RE = re.compile(rb"[\x20-\x7e\t\r\n]{4,}")
    FFMPEG_TIMEOUT_SECONDS = 120

    def __init__(self, convert_binary: bool = False) -> None:
        """Initialize the content source.

        Args:
            convert_binary: If True, binary files are reduced to their printable
                            character runs instead of being rejected.
        """
        self.convert_binary = convert_binary

    def detect_kind(self, path: Path) -> ContentKind:
        if path.name.startswith("."):
            raise UnsupportedFileError(f"Hidden file: {path.name}")

        ext = path.suffix.lower()
        if ext in self.IMAGE_EXTENSIONS:
            return ContentKind.IMAGE
        if ext in self.VIDEO_EXTENSIONS:
            return ContentKind.VIDEO
        return ContentKind.TEXT

    def read_text(self, path: Path) -> str:
        if path.suffix.lower() in self.DOCUMENT_EXTENSIONS:
            text = self._read_document(path)
        else:
            text = self._read_plain(path)

        if not text.strip():
            raise NoExtractableContentError(f"No text content: {path.name}")
        return text

    def _read_document(self, path: Path) -> str:
        try:
            doc = pymupdf.open(path)
        except Exception as e:
            raise UnsupportedFileError(f"Unable to open document {path.name}: {e}") from e

        try:
            return "\n".join(page.get_text() for page in doc)
        finally:
            doc.close()

    def _read_plain(self, path: Path) -> str:
        with open(path, "rb") as fh:
            data = fh.read(self.MAX_READ_BYTES)

        if b"\x00" in data[: self.SNIFF_BYTES]:
            if not self.convert_binary:
                raise UnsupportedFileError(f"Binary file: {path.name} (use --convert-binary to extract text)")
            return "\n".join(run.decode("ascii").strip() for run in self.PRINTABLE_RUN_RE.findall(data))

        return data.decode("utf-8", errors="replace")

    def _probe_duration(self, path: Path) -> float | None:
        result = subprocess.run(
            [
                "ffprobe",
                "-v",
                "error",
                "-show_entries",
                "format=duration",
                "-of",
                "default=noprint_wrappers=1:nokey=1",
                str(path),
            ],
            capture_output=True,
            text=True,
            timeout=self.FFMPEG_TIMEOUT_SECONDS,
        )
        try:
            duration = float(result.stdout.strip())
        except ValueError:
            return None
        return duration if duration > 0 else None

    def extract_frames(self, path: Path, output_dir: Path, frames: int) -> ExtractedFrames:
        """Sample `frames` stills evenly across the video using ffprobe and ffmpeg.

        Raises:
            UnsupportedFileError: If ffmpeg/ffprobe are not installed.
            NoExtractableContentError: If no frame could be extracted.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        try:
            duration = self._probe_duration(path)
            timestamps = [duration * (ix + 0.5) / frames for ix in range(frames)] if duration else [0.0]

            images: list[Path] = []
            for ix, timestamp in enumerate(timestamps):
                frame_path = output_dir / f"frame-{ix + 1:03d}.jpg"
                result = subprocess.run(
                    [
                        "ffmpeg",
                        "-y",
                        "-loglevel",
                        "error",
                        "-ss",
                        f"{timestamp:.3f}",
                        "-i",
                        str(path),
                        "-frames:v",
                        "1",
                        "-q:v",
                        "2",
                        str(frame_path),
                    ],
                    capture_output=True,
                    text=True,
                    timeout=self.FFMPEG_TIMEOUT_SECONDS,
                )
                if result.returncode == 0 and frame_path.exists():
                    images.append(frame_path)
        except FileNotFoundError as e:
            raise UnsupportedFileError("ffmpeg and ffprobe must be installed to process videos") from e

        if not images:
            raise NoExtractableContentError(f"No frames could be extracted from {path.name}")

        length = f"{duration:.0f}-second video" if duration else "video"
        summary = (
            f"{len(images)} frame(s) sampled evenly across a {length}, in chronological order. "
            "Name the video after what these frames show."
        )
        return ExtractedFrames(images=images, video_summary=summary)
