"""Read arithmetic expressions from a text file or an archive."""
from pathlib import Path
import tarfile
import tempfile
from typing import List
import zipfile

import py7zr

from keypad_calculator.common.logger import logger

SUPPORTED_ARCHIVES = (".zip", ".tar.xz", ".7z")


def _archive_format(path: Path) -> str:
    """Return the archive suffix of ``path`` ("" for anything unsupported)."""
    if path.suffixes[-2:] == [".tar", ".xz"]:
        return ".tar.xz"
    return path.suffix if path.suffix in (".zip", ".7z") else ""


def extract_archive(archive_path: Path) -> str:
    """
    Extract the first .txt file found in a supported archive and return its content as a string.

    Supported formats:
    - .zip
    - .tar.xz
    - .7z

    :param Path archive_path: Path to the archive file

    :return: Content of the extracted .txt file
    :rtype: str
    :raises ValueError: If no .txt file is found or format is unsupported
    """
    archive_format = _archive_format(archive_path)

    if archive_format == ".zip":
        with zipfile.ZipFile(archive_path, "r") as zf:
            txt_files = [f for f in zf.namelist() if f.endswith(".txt")]
            if not txt_files:
                raise ValueError("📄❌ No .txt file found in zip archive")
            return zf.read(txt_files[0]).decode("utf-8")

    if archive_format == ".tar.xz":
        with tarfile.open(archive_path, "r:xz") as tf:
            txt_members = [m for m in tf.getmembers() if m.isfile() and m.name.endswith(".txt")]
            if not txt_members:
                raise ValueError("📄❌ No .txt file found in tar.xz archive")
            return tf.extractfile(txt_members[0]).read().decode("utf-8")

    if archive_format == ".7z":
        with py7zr.SevenZipFile(archive_path, mode="r") as archive:
            txt_files = [f for f in archive.getnames() if f.endswith(".txt")]
            if not txt_files:
                raise ValueError("📄❌ No .txt file found in 7z archive")

            # Create a temporary directory for safe extraction
            with tempfile.TemporaryDirectory() as tmpdir:
                tmpdir_path = Path(tmpdir)
                archive.extract(targets=[txt_files[0]], path=tmpdir_path)
                # Read what landed in tmpdir, never a path derived from the member name
                extracted = sorted(p for p in tmpdir_path.rglob("*.txt") if p.is_file())
                if not extracted:
                    raise ValueError("📄❌ No .txt file could be extracted from 7z archive")
                return extracted[0].read_text(encoding="utf-8")

    raise ValueError(f"📄❌ Unsupported input format: {''.join(archive_path.suffixes) or archive_path.name}")


def load_expressions(input_file: Path) -> List[str]:
    """
    Load the non-empty, stripped expression lines of a text file or archive.

    :param Path input_file: Path to a .txt file or a supported archive

    :return: Expressions in file order
    :rtype: List[str]
    :raises ValueError: If the archive format is unsupported or contains no .txt file
    """
    if input_file.suffix == ".txt":
        content = input_file.read_text(encoding="utf-8")
    else:
        content = extract_archive(input_file)

    expressions = [line.strip() for line in content.splitlines() if line.strip()]
    logger.info(f"📄 Loaded {len(expressions)} expressions from {input_file}")
    return expressions
