from link2json.schemas.metadata import ImageDescriptor, MetadataRecord

__all__ = [
    "ImageDescriptor",
    "MetadataRecord",
]
