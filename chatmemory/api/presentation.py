"""Display hints for chat bubbles, keyed by message type."""

from chatmemory.models.conversation import MessageType

_STYLES = {
    MessageType.USER: {"alignment": "end", "color": "#DCF8C6", "margin": [80, 5, 10, 5]},
    MessageType.BOT: {"alignment": "start", "color": "#FFFFFF", "margin": [10, 5, 80, 5]},
}
_FALLBACK = {"alignment": "center", "color": "#808080", "margin": [10, 5, 10, 5]}


def message_style(message_type: MessageType | str | None) -> dict:
    try:
        return dict(_STYLES[MessageType(message_type)])
    except ValueError:
        return dict(_FALLBACK)
