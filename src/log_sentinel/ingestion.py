import logging

from fastapi import UploadFile

from log_sentinel import config, models

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def classify_kind(name: str) -> models.FileKind:
    if name.endswith(tuple(config.CONFIG_EXTENSIONS)):
        return "config"
    return "log"


def load_log_file(name: str, data: bytes) -> models.LogFile:
    if not name:
        raise IngestionError("Uploaded file has no name")

    try:
        content = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise IngestionError(f"File '{name}' is not readable as UTF-8 text: {exc.reason}") from exc

    return models.LogFile(name=name, content=content, kind=classify_kind(name))


async def read_upload(upload: UploadFile) -> models.LogFile:
    name = upload.filename or ""
    try:
        data = await upload.read()
    except OSError as exc:
        raise IngestionError(f"Failed to read '{name}': {exc}") from exc
    finally:
        await upload.close()

    log_file = load_log_file(name, data)
    logger.info(f"Ingested {log_file.name} as {log_file.kind} ({len(log_file.content)} chars)")
    return log_file
