"""Chat orchestration: messages, replies, and conversation titles."""

import asyncio
import logging
from dataclasses import dataclass, field

from bytebuddy.domain.chat import ChatTurn, Conversation
from bytebuddy.domain.errors import (
    GenerationError,
    InvalidInputError,
    UnknownConversationError,
)
from bytebuddy.services.conversations import ConversationService
from bytebuddy.services.generation import GenerationService
from bytebuddy.services.inflight import InFlightGuard
from bytebuddy.services.profiles import ProfileService

ERROR_REPLY = "Sorry, I encountered an error. Please try again."

_logger = logging.getLogger(__name__)


@dataclass
class ChatService:
    """Sends chat messages for one account and records the replies."""

    account_id: str
    conversations: ConversationService
    profiles: ProfileService
    generation: GenerationService
    guard: InFlightGuard
    _background: set[asyncio.Task[None]] = field(default_factory=set, init=False)

    async def send_message(
        self, conversation_id: str | None, text: str
    ) -> ChatTurn:
        """Append a user message, request a reply, and append it.

        A missing conversation id starts a new conversation, which is retitled
        in the background once the first reply arrives. A failed reply is
        recorded as an apology message from the assistant.
        """
        if not text.strip():
            raise InvalidInputError("Message cannot be empty.")
        is_new = conversation_id is None
        if conversation_id is None:
            conversation = self.conversations.create()
        else:
            existing = self.conversations.get(conversation_id)
            if existing is None:
                raise UnknownConversationError(conversation_id)
            conversation = existing

        with self.guard.hold(("chat", conversation.id)):
            user_message = self.conversations.append_message(
                conversation.id, "user", text
            )
            history = self.conversations.messages(conversation.id)
            profile = self.profiles.get(self.account_id)
            try:
                result = await self.generation.chat_reply(history, profile)
            except GenerationError:
                _logger.warning("Chat reply failed for %s", conversation.id)
                reply = self.conversations.append_message(
                    conversation.id, "assistant", ERROR_REPLY
                )
                return ChatTurn(
                    conversation=self.conversations.get(conversation.id)
                    or conversation,
                    user_message=user_message,
                    reply=reply,
                    failed=True,
                )
            reply = self.conversations.append_message(
                conversation.id, "assistant", result.text, result.citations
            )

        if is_new:
            self._schedule_title(conversation, text)
        return ChatTurn(
            conversation=self.conversations.get(conversation.id) or conversation,
            user_message=user_message,
            reply=reply,
        )

    def is_sending(self, conversation_id: str) -> bool:
        """Return True while a message to the conversation is in flight."""
        return self.guard.is_active(("chat", conversation_id))

    async def drain(self) -> None:
        """Wait for pending background title updates."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def cancel_background(self) -> None:
        """Cancel pending title updates."""
        for task in list(self._background):
            task.cancel()

    def _schedule_title(self, conversation: Conversation, seed_text: str) -> None:
        task = asyncio.create_task(self._retitle(conversation.id, seed_text))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _retitle(self, conversation_id: str, seed_text: str) -> None:
        title = await self.generation.synthesize_title(seed_text)
        self.conversations.rename(conversation_id, title)
