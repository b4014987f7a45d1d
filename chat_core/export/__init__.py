from chat_core.export.markdown import ExportArtifact, export_conversation, save_artifact

__all__ = ["ExportArtifact", "export_conversation", "save_artifact"]
