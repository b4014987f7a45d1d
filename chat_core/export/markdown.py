"""会话导出为 Markdown（可直接放入 Obsidian 库）。

文档结构：

    # <标题> - YYYY-MM-DD HH:MM

    ## <角色>

    <内容>

    ---
    <创建时间标签>: YYYY-MM-DD HH:MM

文件名使用可排序的时间戳 YYYY-MM-DD_HH-MM-SS。
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from chat_core.domain.exceptions import NothingToExportError
from chat_core.domain.models import Message
from chat_core.prompts import Labels

FILENAME_TIME_FORMAT = "%Y-%m-%d_%H-%M-%S"
DOCUMENT_TIME_FORMAT = "%Y-%m-%d %H:%M"


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    content: str


def render_markdown(messages: Sequence[Message], labels: Labels, now: datetime) -> str:
    date_str = now.strftime(DOCUMENT_TIME_FORMAT)
    parts = [f"# {labels.export_title} - {date_str}\n\n"]
    for msg in messages:
        parts.append(f"## {labels.role_label(msg.role)}\n\n{msg.content}\n\n")
    parts.append(f"---\n{labels.export_created}: {date_str}\n")
    return "".join(parts)


def export_conversation(
    messages: Sequence[Message], labels: Labels, now: Optional[datetime] = None
) -> ExportArtifact:
    if not messages:
        raise NothingToExportError(code="NOTHING_TO_EXPORT", message=labels.nothing_to_export)
    now = now or datetime.now()
    return ExportArtifact(
        filename=f"{labels.export_filename}_{now.strftime(FILENAME_TIME_FORMAT)}.md",
        content=render_markdown(messages, labels, now),
    )


def save_artifact(artifact: ExportArtifact, directory: str | Path) -> Path:
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / artifact.filename
    path.write_text(artifact.content, encoding="utf-8")
    return path
