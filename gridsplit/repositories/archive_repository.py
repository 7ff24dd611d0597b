from io import BytesIO
from typing import Iterable, Tuple
import logging
import zipfile

logger = logging.getLogger(__name__)


class ArchiveRepository:
    """
    Builds deflate zip archives in memory.
    Entries are placed under a single top-level folder.
    """

    @staticmethod
    def build_zip(folder: str, entries: Iterable[Tuple[str, bytes]]) -> bytes:
        buf = BytesIO()
        count = 0
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, data in entries:
                zf.writestr(f"{folder}/{name}", data)
                count += 1
        logger.debug(f"Zipped {count} entries under {folder}/")
        return buf.getvalue()
