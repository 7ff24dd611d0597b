from .split_and_package import split_and_package
from .edit_session import EditSession
from .worker import ProcessingWorker
