from .conversation import ConversationLastMessage, ConversationResponse, ConversationUser
from .message_requests import MarkMessagesReadRequest, SendMessageRequest
from .message_responses import MarkMessagesReadResponse, MessageResponse, UnreadCountResponse

__all__ = [
    "ConversationLastMessage",
    "ConversationResponse",
    "ConversationUser",
    "MarkMessagesReadRequest",
    "MarkMessagesReadResponse",
    "MessageResponse",
    "SendMessageRequest",
    "UnreadCountResponse",
]
