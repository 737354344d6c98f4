from conversational_assistant.api.auth.base import AuthProvider
from conversational_assistant.api.auth.header import HeaderAuthProvider

__all__ = ["AuthProvider", "HeaderAuthProvider"]
