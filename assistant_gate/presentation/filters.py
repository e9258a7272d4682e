from __future__ import annotations

from aiogram import F
from aiogram.enums import ChatType

# Group and channel updates are ignored by every router.
private_chat = F.chat.type == ChatType.PRIVATE
