from clouddedup.files.service import FileService, storage_entry_to_dict

__all__ = ["FileService", "storage_entry_to_dict"]
