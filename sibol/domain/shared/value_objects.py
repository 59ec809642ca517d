"""Value Objects do domínio — imutáveis, comparados por valor."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sibol.domain.shared.exceptions import ValidationError

_FOLDER_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Remark:
    """
    Uma linha do log de observações de um ticket.
    O log é texto append-only: cada linha é ``[YYYY-MM-DD HH:MM UTC] texto``.
    """
    text: str
    written_at: datetime

    def __post_init__(self):
        if not self.text or not self.text.strip():
            raise ValidationError("Observação não pode ser vazia")

    def render(self) -> str:
        stamp = self.written_at.strftime("%Y-%m-%d %H:%M")
        # Uma observação com quebras de linha continua ocupando uma linha do log
        body = " ".join(self.text.split())
        return f"[{stamp} UTC] {body}"

    def append_to(self, log: Optional[str]) -> str:
        """Retorna o log com esta observação anexada ao final."""
        if not log:
            return self.render()
        return f"{log}\n{self.render()}"


@dataclass(frozen=True)
class AttachmentRef:
    """
    Referência a um arquivo já armazenado pelo serviço de arquivos.
    O binder só persiste o que o storage devolveu — nenhum byte passa por aqui.
    """
    file_path: str
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    folder: Optional[str] = None

    def __post_init__(self):
        if not self.file_path or not self.file_path.strip():
            raise ValidationError("file_path do anexo é obrigatório")
        if not self.file_name or not self.file_name.strip():
            raise ValidationError("file_name do anexo é obrigatório")
        if self.file_size is not None and self.file_size < 0:
            raise ValidationError("file_size não pode ser negativo")


def normalize_attachment_folder(folder: Optional[str], default: str = "maintenance") -> str:
    """Sanitiza o subdiretório lógico de um anexo."""
    if not folder or not folder.strip():
        return default
    normalized = _FOLDER_UNSAFE.sub("_", folder.strip()).lower()
    return normalized or default
