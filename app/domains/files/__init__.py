from app.domains.files.services import FileAccessError, SecureFileResolver, ServedFile

__all__ = ["FileAccessError", "SecureFileResolver", "ServedFile"]
