import re
import tempfile
from datetime import datetime

import pytest

from chat_core.domain.exceptions import NothingToExportError
from chat_core.domain.models import Message
from chat_core.export.markdown import export_conversation, save_artifact

NOW = datetime(2024, 3, 5, 9, 7, 4)


def test_export_empty_conversation_fails(labels):
    with pytest.raises(NothingToExportError):
        export_conversation([], labels, now=NOW)


def test_export_renders_messages_in_order(labels):
    artifact = export_conversation([Message("user", "hi"), Message("ai", "hello")], labels, now=NOW)

    assert artifact.filename == "AI会話_2024-03-05_09-07-04.md"
    assert artifact.content == (
        "# AI会話 - 2024-03-05 09:07\n\n"
        "## ユーザー\n\nhi\n\n"
        "## AI\n\nhello\n\n"
        "---\n作成日時: 2024-03-05 09:07\n"
    )
    assert artifact.content.index("## ユーザー") < artifact.content.index("## AI")
    assert len(re.findall(r"^作成日時: ", artifact.content, flags=re.M)) == 1


def test_save_artifact_writes_utf8_file(labels):
    artifact = export_conversation([Message("user", "日本語")], labels, now=NOW)
    with tempfile.TemporaryDirectory() as d:
        path = save_artifact(artifact, f"{d}/vault")
        assert path.name == artifact.filename
        assert path.read_text(encoding="utf-8") == artifact.content
