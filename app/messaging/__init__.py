"""
Messaging app: direct conversations and enquiry threads.

This app handles:
- Direct conversations, one per unordered pair of users
- Enquiry threads anchored to a subject and a target company
- Per-participant unread counters and read receipts
- Message append and history sync

Both kinds of conversation are a single Thread model with a ``kind``
field, so messages, participants and counters are implemented once.

Related apps:
    - accounts: ProfileDirectory resolves enquiry targets
    - attachments: AttachmentService stores files embedded in messages
"""
