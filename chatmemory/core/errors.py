"""Error kinds raised by the storage layer and the chat session."""


class StorageError(Exception):
    """A storage read or write failed. The original driver error is chained."""


class StorageUnavailable(StorageError):
    """The schema could not be created or the database could not be reached."""


class ConversationNotFound(StorageError):
    def __init__(self, conversation_id: int):
        super().__init__(f"Conversation {conversation_id} not found")
        self.conversation_id = conversation_id


class SessionBusy(RuntimeError):
    """A session operation was attempted while a response is still pending."""
