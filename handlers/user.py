from aiogram import F
from aiogram import Router
from aiogram.filters import CommandStart, Command, CommandObject
from aiogram.types import Message

from data.config import locale
from media_api import PLATFORM_EXAMPLES, PlatformKind
from misc.utils import lang_func

user_router = Router(name=__name__)


@user_router.message(CommandStart(), F.chat.type == 'private')
async def send_start(message: Message) -> None:
    lang = lang_func(message.from_user.language_code)
    await message.answer(locale[lang]['start'], disable_web_page_preview=True)


@user_router.message(Command('help'))
async def send_help(message: Message) -> None:
    lang = lang_func(message.from_user.language_code)
    await message.answer(locale[lang]['help'], disable_web_page_preview=True)


@user_router.message(Command('example'))
async def send_example(message: Message, command: CommandObject) -> None:
    lang = lang_func(message.from_user.language_code)
    name = (command.args or '').strip().lower()
    platforms = [p for p in PlatformKind if p.value.lower() == name] or list(PlatformKind)
    lines = [f'{p.value}: <code>{PLATFORM_EXAMPLES[p]}</code>' for p in platforms]
    await message.answer(locale[lang]['example'] + '\n' + '\n'.join(lines), disable_web_page_preview=True)
