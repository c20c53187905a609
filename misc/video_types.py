import logging
from typing import Optional

from aiogram.exceptions import TelegramBadRequest
from aiogram.types import BufferedInputFile, Message
from aiogram.utils.keyboard import InlineKeyboardBuilder
from aiogram.utils.text_decorations import html_decoration

from data.config import locale, config
from media_api import FileSink, VideoDescriptor
from media_api.resolvers import STOCK_THUMBNAIL_ALT

logger = logging.getLogger(__name__)

archive_dir = config["download"]["dir"]


def download_button(key, lang):
    keyb = InlineKeyboardBuilder()
    keyb.button(text=locale[lang]['download_now'], callback_data=f'download/{key}')
    return keyb.as_markup()


def open_button(url, lang):
    keyb = InlineKeyboardBuilder()
    keyb.button(text=locale[lang]['open_link'], url=url)
    return keyb.as_markup()


def result_caption(lang, descriptor: VideoDescriptor):
    return locale[lang]['result'].format(
        title=html_decoration.quote(descriptor.title),
        duration=html_decoration.quote(descriptor.duration),
        platform=descriptor.platform.value,
        author=html_decoration.quote(descriptor.author),
    )


async def send_video_info(user_msg: Message, descriptor: VideoDescriptor, key, lang):
    """Render a resolved descriptor with its download button."""
    caption = result_caption(lang, descriptor)
    markup = download_button(key, lang)
    for thumbnail in (descriptor.thumbnail_url, STOCK_THUMBNAIL_ALT):
        try:
            return await user_msg.reply_photo(photo=thumbnail, caption=caption, reply_markup=markup)
        except TelegramBadRequest as e:
            logger.warning(f'Thumbnail {thumbnail} rejected: {e}')
    return await user_msg.reply(caption, reply_markup=markup, disable_web_page_preview=True)


class TelegramSink:
    """Upload downloaded media to the chat as a document.

    When DOWNLOAD_DIR is configured a copy is also written there.
    """

    def __init__(self, user_msg: Message, caption: str):
        self.user_msg = user_msg
        self.caption = caption
        self.archive: Optional[FileSink] = FileSink(archive_dir) if archive_dir else None

    async def save(self, filename: str, data: bytes) -> Message:
        if self.archive:
            await self.archive.save(filename, data)
        return await self.user_msg.reply_document(
            document=BufferedInputFile(data, filename),
            caption=self.caption,
            disable_content_type_detection=True,
        )


def external_opener(user_msg: Message, lang):
    """Return a callback sending the raw download URL as a link button."""

    async def open_external(url: str) -> Message:
        return await user_msg.reply(locale[lang]['open_external'], reply_markup=open_button(url, lang))

    return open_external
