"""
Attachments app: validates, classifies and stores uploaded files.

Files are written through Django's default storage and handed back as
AttachmentDescriptor values that messages embed by value. Nothing here
keeps a database row per file.

Usage:
    from attachments.services import AttachmentService

    result = AttachmentService.ingest(request.FILES.getlist("files"))
    if result:
        descriptors = [d.to_dict() for d in result.data]
"""
