import asyncio
import logging

from data.loader import bot, dp, media_client
from handlers.get_video import video_router
from handlers.user import user_router


async def main() -> None:
    dp.include_routers(
        user_router,
        video_router,
    )
    bot_info = await bot.get_me()
    logging.info(f'{bot_info.full_name} [@{bot_info.username}, id:{bot_info.id}]')
    try:
        await dp.start_polling(bot)
    finally:
        await media_client.close()


if __name__ == "__main__":
    asyncio.run(main())
