from .image_repository import ImageRepository
from .archive_repository import ArchiveRepository
