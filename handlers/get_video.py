import logging
from aiogram import Router, F
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, ReactionTypeEmoji, CallbackQuery
from aiogram.utils.text_decorations import html_decoration

from data.config import locale, admin_ids
from data.loader import bot, media_client
from media_api import MediaError, validate_url
from misc.descriptor_store import forget, recall, remember
from misc.queue_manager import QueueManager
from misc.utils import error_catch, lang_func
from misc.video_types import send_video_info, TelegramSink, external_opener

video_router = Router(name=__name__)


@video_router.message(F.text)
async def send_video_info_message(message: Message, state: FSMContext):
    # Status message var
    status_message = False
    # Group chat set
    group_chat = message.chat.type != 'private'
    lang = lang_func(message.from_user.language_code)
    video_link = message.text.strip()
    # Check if link is valid
    if not validate_url(video_link):
        # Send error message, if not in group chat
        if not group_chat:
            await message.reply(locale[lang]['link_error'])
        return
    queue = QueueManager.get_instance()
    async with queue.info_queue(message.from_user.id) as acquired:
        if not acquired:
            await message.reply(locale[lang]['wait'])
            return
        try:
            try:  # If reaction is allowed, send it
                await message.react([ReactionTypeEmoji(emoji='👀')], disable_notification=True)
            except Exception:  # Send status message, if reaction is not allowed, and save it
                status_message = await message.reply('⏳', disable_notification=True)
            try:
                descriptor = await media_client.video(video_link)
            except MediaError as e:
                logging.info(f'Resolve failed: CHAT {message.chat.id} - LINK {video_link} - {e}')
                if status_message:
                    await status_message.delete()
                else:
                    await message.react([ReactionTypeEmoji(emoji='😢')])
                await message.reply(locale[lang]['error'].format(html_decoration.quote(str(e))))
                return
            # Keep the descriptor for the download button
            key = await remember(state, descriptor)
            await send_video_info(message, descriptor, key, lang)
            if status_message:
                await status_message.delete()
            else:
                await message.react([])
            logging.info(f'Video Info: CHAT {message.chat.id} - {descriptor.platform.value} {video_link}')
        except Exception as e:  # If something went wrong
            error_text = error_catch(e)
            logging.error(error_text)
            if message.from_user.id in admin_ids:
                await message.reply('<code>{0}</code>'.format(html_decoration.quote(error_text[-3500:])))
            try:
                if status_message:
                    await status_message.delete()
                await message.reply(locale[lang]['error'].format(locale[lang]['unknown_error']))
            except Exception as e:
                logging.error(f'Cant send error message: {e}')


@video_router.callback_query(F.data.startswith('download/'))
async def send_video_file(callback_query: CallbackQuery, state: FSMContext):
    call_msg = callback_query.message
    lang = lang_func(callback_query.from_user.language_code)
    key = callback_query.data.removeprefix('download/')
    # Messages older than 48 hours come as InaccessibleMessage
    if not isinstance(call_msg, Message):
        return await callback_query.answer(locale[lang]['expired'], show_alert=True)
    descriptor = await recall(state, key)
    if descriptor is None:
        return await callback_query.answer(locale[lang]['expired'], show_alert=True)
    queue = QueueManager.get_instance()
    async with queue.download_queue(callback_query.from_user.id) as acquired:
        if not acquired:
            return await callback_query.answer(locale[lang]['wait'], show_alert=True)
        status_message = False
        try:
            await callback_query.answer(locale[lang]['download_start'])
            status_message = await call_msg.reply(locale[lang]['download_start'], disable_notification=True)
            await bot.send_chat_action(chat_id=call_msg.chat.id, action='upload_document')
            sink = TelegramSink(call_msg, html_decoration.quote(descriptor.title))
            result = await media_client.download(descriptor, sink, external_opener(call_msg, lang))
            await forget(state, key)
            if result.saved:
                text = locale[lang]['download_done'].format(html_decoration.quote(descriptor.title))
            else:
                text = locale[lang]['download_external']
            try:
                await status_message.edit_text(text)
            except Exception as e:
                logging.debug(f'Cant edit status message: {e}')
            logging.info(f'Video Download: CHAT {call_msg.chat.id} - {result.outcome.value} {descriptor.download_url}')
        except Exception as e:  # If something went wrong
            error_text = error_catch(e)
            logging.error(error_text)
            if callback_query.from_user.id in admin_ids:
                await call_msg.reply('<code>{0}</code>'.format(html_decoration.quote(error_text[-3500:])))
            try:
                if status_message:
                    await status_message.delete()
                await call_msg.reply(locale[lang]['error'].format(locale[lang]['unknown_error']))
            except Exception as e:
                logging.error(f'Cant send error message: {e}')
