"""Armazenamento de anexos no filesystem local, organizado por pasta lógica."""

from __future__ import annotations

import uuid
from pathlib import Path

from fastapi import UploadFile

from sibol.domain.shared.exceptions import ValidationError
from sibol.domain.shared.value_objects import AttachmentRef, normalize_attachment_folder
from sibol.infrastructure.config import get_settings

settings = get_settings()


class FileStorageError(ValidationError):
    """Arquivo recusado (tipo ou tamanho)."""
    pass


class FileStorageService:
    """Grava o arquivo e devolve a referência que o binder vai persistir."""

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _folder_dir(self, folder: str) -> Path:
        d = self.base_dir / folder
        d.mkdir(parents=True, exist_ok=True)
        return d

    async def save(self, file: UploadFile, folder: str | None = None) -> AttachmentRef:
        if file.content_type not in settings.ALLOWED_CONTENT_TYPES:
            raise FileStorageError(
                f"Tipo não permitido: {file.content_type}. "
                f"Permitidos: {', '.join(settings.ALLOWED_CONTENT_TYPES)}"
            )

        content = await file.read()
        if len(content) > settings.MAX_FILE_SIZE_BYTES:
            raise FileStorageError(
                f"Arquivo excede o limite de {settings.MAX_FILE_SIZE_MB}MB"
            )

        safe_folder = normalize_attachment_folder(folder, settings.DEFAULT_ATTACHMENT_FOLDER)
        ext = Path(file.filename or "file").suffix.lower()
        stored_name = f"{uuid.uuid4().hex}{ext}"
        dest = self._folder_dir(safe_folder) / stored_name
        dest.write_bytes(content)

        return AttachmentRef(
            file_path=f"{safe_folder}/{stored_name}",
            file_name=file.filename or "unnamed",
            file_type=file.content_type,
            file_size=len(content),
            folder=safe_folder,
        )

    def delete(self, file_path: str) -> None:
        path = self.base_dir / file_path
        if path.exists():
            path.unlink()
