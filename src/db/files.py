"""Transcripts stored as plain text files (one match per file)."""

from pathlib import Path

from src.core.exceptions import RepositoryError


def save_transcript(path: str | Path, transcript: str) -> None:
    try:
        Path(path).write_text(transcript, encoding="utf-8")
    except OSError as error:
        raise RepositoryError(f"Failed to write transcript to {path}: {error}") from error


def load_transcript(path: str | Path) -> bytes:
    """Raw bytes: decoding (and rejecting bad encodings) is up to the transcript decoder."""
    try:
        return Path(path).read_bytes()
    except OSError as error:
        raise RepositoryError(f"Failed to read transcript from {path}: {error}") from error
