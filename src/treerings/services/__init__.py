from .backup_service import BackupService
from .analysis_store import AnalysisStore
from .file_service import FileService

__all__ = ["BackupService", "AnalysisStore", "FileService"]
