from .session import FlashMessage, FormState, WebSession

__all__ = ["FlashMessage", "FormState", "WebSession"]
