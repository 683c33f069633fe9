from app.models.message import Message

__all__ = ["Message"]
