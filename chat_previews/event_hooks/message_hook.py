import logging

import discord

from chat_previews.model import ChatMessage
from chat_previews.orchestrator import LinkPreviewer

logger = logging.getLogger(__name__)


def to_chat_message(message: discord.Message) -> ChatMessage:
    """Wrap a Discord message in the engine's :class:`ChatMessage`."""
    return ChatMessage(id=message.id, text=message.content or "")


async def handle(previewer: LinkPreviewer, message: discord.Message) -> ChatMessage | None:
    """
    Start link previews for an incoming Discord message.

    Returns the tracked :class:`ChatMessage` (its ``previews`` fill in as
    pipelines finish), or ``None`` when the message is skipped.
    """

    # Bots (including us) and messages with embeds suppressed get no previews.
    if getattr(message.author, "bot", False):
        return None
    if getattr(getattr(message, "flags", None), "suppress_embeds", False):
        logger.debug("Embeds suppressed on message %s; skipping previews", message.id)
        return None

    chat_message = to_chat_message(message)
    tasks = previewer.process(chat_message, channel_id=getattr(message.channel, "id", None))
    if tasks:
        logger.info(
            "Queued %d preview(s) for message %s in channel %s",
            len(tasks),
            message.id,
            getattr(message.channel, "id", "unknown"),
        )
    return chat_message
