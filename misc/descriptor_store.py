from typing import Optional
from uuid import uuid4

from aiogram.fsm.context import FSMContext

from media_api import VideoDescriptor

STATE_KEY = 'descriptors'
# Download buttons older than this many results per chat stop working
MAX_DESCRIPTORS = 5


async def remember(state: FSMContext, descriptor: VideoDescriptor) -> str:
    """Store the descriptor for a download button and return its key."""
    key = uuid4().hex[:16]
    data = await state.get_data()
    stored = dict(data.get(STATE_KEY) or {})
    stored[key] = descriptor.as_dict()
    # dicts keep insertion order, the oldest keys come first
    while len(stored) > MAX_DESCRIPTORS:
        del stored[next(iter(stored))]
    await state.update_data({STATE_KEY: stored})
    return key


async def recall(state: FSMContext, key: str) -> Optional[VideoDescriptor]:
    data = await state.get_data()
    entry = (data.get(STATE_KEY) or {}).get(key)
    if entry is None:
        return None
    return VideoDescriptor.from_dict(entry)


async def forget(state: FSMContext, key: str) -> None:
    data = await state.get_data()
    stored = dict(data.get(STATE_KEY) or {})
    if stored.pop(key, None) is not None:
        await state.update_data({STATE_KEY: stored})
