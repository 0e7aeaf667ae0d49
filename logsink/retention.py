"""Backup housekeeping for rotated files: naming, compression, and retention."""

import gzip
import os
import shutil
from datetime import datetime, timedelta, timezone

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"


def backup_name(log_filename: str, when: datetime) -> str:
    return f"{log_filename}.{when.strftime(TIMESTAMP_FORMAT)}"


def compress_file(filepath: str) -> str:
    """Gzip-compress a file in place. Returns the .gz path."""
    gz_path = filepath + ".gz"
    with open(filepath, "rb") as f_in, gzip.open(gz_path, "wb") as f_out:
        shutil.copyfileobj(f_in, f_out)
    os.remove(filepath)
    return gz_path


def get_rotated_files(log_dir: str, log_filename: str) -> list[str]:
    """List backups of *log_filename* sorted oldest-first (lexicographic on timestamp suffix)."""
    if not os.path.isdir(log_dir):
        return []
    rotated = [
        name
        for name in os.listdir(log_dir)
        if parse_rotation_timestamp(name, log_filename) is not None
    ]
    rotated.sort()
    return rotated


def parse_rotation_timestamp(filename: str, log_filename: str) -> datetime | None:
    """Extract the rotation timestamp from a backup filename. Returns None on failure."""
    prefix = log_filename + "."
    if not filename.startswith(prefix):
        return None
    suffix = filename[len(prefix):]
    if suffix.endswith(".gz"):
        suffix = suffix[:-3]
    try:
        return datetime.strptime(suffix, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def enforce_retention(
    log_dir: str,
    log_filename: str,
    max_backups: int = 0,
    max_age_days: int = 0,
    time_func=None,
) -> list[str]:
    """Delete backups that are too old or exceed the count limit.

    A limit of 0 disables that check. Returns the deleted filenames.
    """
    if max_backups <= 0 and max_age_days <= 0:
        return []

    now_func = time_func or (lambda: datetime.now(timezone.utc))
    deleted = []
    survivors = get_rotated_files(log_dir, log_filename)

    if max_age_days > 0:
        cutoff = now_func() - timedelta(days=max_age_days)
        kept = []
        for name in survivors:
            if parse_rotation_timestamp(name, log_filename) < cutoff:
                os.remove(os.path.join(log_dir, name))
                deleted.append(name)
            else:
                kept.append(name)
        survivors = kept

    # Count-based purge on survivors (oldest first, they're already sorted)
    if max_backups > 0:
        while len(survivors) > max_backups:
            name = survivors.pop(0)
            os.remove(os.path.join(log_dir, name))
            deleted.append(name)

    return deleted
