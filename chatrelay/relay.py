import logging
from typing import NamedTuple

from chatrelay.exceptions import ValidationError
from chatrelay.models import Message, Role
from chatrelay.provider import PLACEHOLDER_REPLY, Configured, reply_text

logger = logging.getLogger(__name__)


class Exchange(NamedTuple):
    user_message: Message
    ai_message: Message


class RelayService:
    """Turns one user message into a stored user/assistant pair.

    Storage errors propagate and stop the turn. Provider failures never do:
    they become the text of the assistant message.
    """

    def __init__(self, store, provider_config, client=None):
        self.store = store
        self.provider_config = provider_config
        self.client = client

    @property
    def configured(self):
        return isinstance(self.provider_config, Configured)

    def submit(self, message):
        if not message or not message.strip():
            raise ValidationError("Message cannot be empty")

        user_message = self.store.append(Role.USER, message)
        ai_text = self.resolve_reply(message)
        ai_message = self.store.append(Role.ASSISTANT, ai_text)
        return Exchange(user_message, ai_message)

    def resolve_reply(self, message):
        if not self.configured or self.client is None:
            logger.info("Provider not configured, storing placeholder reply")
            return PLACEHOLDER_REPLY
        try:
            result = self.client.complete(message)
        except Exception as e:
            logger.exception(f"Error calling completion provider: {e}")
            return f"Error connecting to AI: {e}"
        return reply_text(result)

    def history(self):
        return self.store.list_all()

    def clear(self):
        return self.store.clear_all()
