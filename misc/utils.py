from sys import exc_info
from traceback import format_exception

from data.config import locale


def lang_func(usrlang: str) -> str:
    if usrlang and usrlang in locale['langs']:
        return usrlang
    return 'en'


def error_catch(e):
    error_type, error_instance, tb = exc_info()
    tb_str = format_exception(error_type, error_instance, tb)
    error_message = "".join(tb_str)
    return error_message
