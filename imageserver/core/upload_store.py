"""
Upload store - a flat directory holding one file per uploaded image.

The filename key is used verbatim as the file name once validated. No index
is kept in memory; existence is checked against the filesystem on every call.
"""

import enum
import os
import re
import tempfile
from pathlib import Path

from .config import settings
from .errors import ImageNotFoundError, InvalidKeyError, StorageIOError

_KEY_PATTERN = re.compile(r"[^/\\\x00]+\.(png|jpg)", re.IGNORECASE)


def _default_file_mode() -> int:
    """Mode a plain open() would create under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


# os.umask is process-wide; read it once at import.
_FILE_MODE = _default_file_mode()


class ImageFormat(enum.Enum):
    PNG = "png"
    JPEG = "jpeg"

    @property
    def media_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pillow_name(self) -> str:
        """Format name understood by ``PIL.Image.save``."""
        return "PNG" if self is ImageFormat.PNG else "JPEG"


def validate_key(key: str) -> str:
    """Return ``key`` unchanged if it names a single png/jpg file.

    Raises InvalidKeyError otherwise.
    """
    if not key or not _KEY_PATTERN.fullmatch(key):
        raise InvalidKeyError()
    return key


def image_format_for(key: str) -> ImageFormat:
    extension = validate_key(key).rsplit(".", 1)[1].lower()
    if extension == "png":
        return ImageFormat.PNG
    return ImageFormat.JPEG


class UploadStore:
    def __init__(self, root: Path | str):
        self.root = Path(root)

    def initialize(self) -> None:
        """Create the storage root. Safe to call repeatedly."""
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.root / validate_key(key)

    def exists(self, key: str) -> bool:
        path = self.path_for(key)
        return path.is_file() and os.access(path, os.R_OK)

    def write(self, key: str, data: bytes) -> int:
        """Replace the content stored under ``key``; return bytes written.

        The file is written under a temporary name and moved into place, so
        concurrent readers see either the old or the new content.
        """
        path = self.path_for(key)
        tmp_name = None
        try:
            self.initialize()
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".upload-", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # mkstemp creates owner-only files.
            os.chmod(tmp_name, _FILE_MODE)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StorageIOError(str(e)) from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        return len(data)

    def read(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise ImageNotFoundError() from e
        except OSError as e:
            raise StorageIOError(str(e)) from e


def get_upload_store() -> UploadStore:
    """FastAPI dependency returning the configured store."""
    return UploadStore(settings.UPLOADS_DIR)
