import logging
import sys
import os
import json
import inspect
import datetime
from pathlib import Path
from functools import wraps
import traceback

log_dir = Path(os.getenv("LOG_DIR") or Path(__file__).parent)
log_dir.mkdir(parents=True, exist_ok=True)

# ANSI colours for console output
BLUE = '\033[94m'
GREEN = '\033[92m'
YELLOW = '\033[93m'
RED = '\033[91m'
PURPLE = '\033[95m'
CYAN = '\033[96m'
BOLD = '\033[1m'
END = '\033[0m'

# Headers that must never end up in the debug log
HIDDEN_HEADERS = {"cookie", "set-cookie", "authorization"}


def format_object(obj):
    if hasattr(obj, '__dict__'):
        return str({k: v for k, v in obj.__dict__.items() if not k.startswith('_')})
    if isinstance(obj, (list, dict, tuple, set)):
        try:
            return json.dumps(obj, indent=2, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(obj)
    return str(obj)


def _safe_headers(headers):
    return {
        key: ("***" if key.lower() in HIDDEN_HEADERS else value)
        for key, value in dict(headers).items()
    }


class DebugLogger:
    """Расширенный логгер для дебага с информацией о месте вызова и цветным выводом"""

    def __init__(self, name="debug", level=logging.DEBUG):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        # Очищаем handlers если они уже были добавлены
        if self.logger.handlers:
            self.logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        )

        file_handler = logging.FileHandler(log_dir / "debug.log", encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

    def debug(self, message, *args, **kwargs):
        """Дебаг лог с информацией о вызывающем коде"""
        frame = inspect.currentframe().f_back
        filename = frame.f_code.co_filename
        lineno = frame.f_lineno
        function = frame.f_code.co_name

        # Относительный путь внутри пакета
        marker = "task_manager"
        if marker in filename:
            filename = filename[filename.index(marker):]

        caller_info = f"{BLUE}[{filename}:{lineno} - {function}]{END}"
        self.logger.debug(f"{caller_info} {message}", *args, **kwargs)

    def info(self, message, *args, **kwargs):
        self.logger.info(f"{GREEN}{message}{END}", *args, **kwargs)

    def warning(self, message, *args, **kwargs):
        self.logger.warning(f"{YELLOW}{message}{END}", *args, **kwargs)

    def error(self, message, *args, **kwargs):
        """Лог ошибок, с трейсом если он есть"""
        trace = traceback.format_exc()
        if trace and trace != 'NoneType: None\n':
            message = f"{message}\n{RED}Traceback:{END}\n{trace}"
        self.logger.error(f"{RED}{message}{END}", *args, **kwargs)

    def start_func(self, func_name, params=None):
        params_str = ""
        if params:
            params_str = f" с параметрами: {format_object(params)}"
        self.logger.debug(f"{PURPLE}Начало выполнения функции {func_name}{END}{params_str}")

    def end_func(self, func_name, result=None, execution_time=None):
        result_str = ""
        if result is not None:
            formatted = format_object(result)
            result_str = f", результат: {formatted[:1000]}"
            if len(formatted) > 1000:
                result_str += "... [обрезано]"

        time_str = ""
        if execution_time:
            time_str = f", время выполнения: {execution_time:.4f}с"

        self.logger.debug(f"{PURPLE}Окончание выполнения функции {func_name}{END}{result_str}{time_str}")

    def log_exception(self, message="Произошло исключение"):
        """Логирование исключения с трейсом"""
        exc_type, exc_value, _ = sys.exc_info()
        if exc_type:
            self.error(f"{message}: {exc_type.__name__}: {exc_value}")
        else:
            self.error(message)

    def log_request(self, request):
        """Логирование входящего HTTP запроса"""
        method = getattr(request, 'method', 'UNKNOWN')
        url = str(getattr(request, 'url', 'UNKNOWN'))
        client = getattr(request, 'client', None)
        client_host = client.host if client else "unknown"
        headers = _safe_headers(getattr(request, 'headers', {}))

        self.debug(
            f"{CYAN}HTTP запрос:{END} {method} {url}\n"
            f"{CYAN}Клиент:{END} {client_host}\n"
            f"{CYAN}Заголовки:{END} {json.dumps(headers, indent=2, ensure_ascii=False)}"
        )

    def log_response(self, response, process_time=None):
        """Логирование исходящего HTTP ответа"""
        status_code = getattr(response, 'status_code', 0)
        headers = _safe_headers(getattr(response, 'headers', {}))

        color = GREEN if 200 <= status_code < 400 else YELLOW if 400 <= status_code < 500 else RED

        info = (
            f"{CYAN}HTTP ответ:{END} {color}Статус {status_code}{END}\n"
            f"{CYAN}Заголовки:{END} {json.dumps(headers, indent=2, ensure_ascii=False)}"
        )
        if process_time is not None:
            info += f"\n{CYAN}Время обработки:{END} {process_time:.3f}с"

        self.debug(info)


def _call_args(func, args, kwargs):
    func_args = dict(zip(inspect.getfullargspec(func).args, args))
    func_args.update(kwargs)
    # Сессию БД, self и cls не логируем
    for name in ('self', 'cls', 'db'):
        func_args.pop(name, None)
    return func_args


def log_function(logger=None):
    """Декоратор для автоматического логирования функций (sync и async)"""

    def decorator(func):
        active_logger = logger or debug_logger

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = datetime.datetime.now()
                active_logger.start_func(func.__name__, _call_args(func, args, kwargs))
                try:
                    result = await func(*args, **kwargs)
                except Exception:
                    active_logger.log_exception(f"Ошибка в функции {func.__name__}")
                    raise
                execution_time = (datetime.datetime.now() - start_time).total_seconds()
                active_logger.end_func(func.__name__, result, execution_time)
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = datetime.datetime.now()
            active_logger.start_func(func.__name__, _call_args(func, args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                active_logger.log_exception(f"Ошибка в функции {func.__name__}")
                raise
            execution_time = (datetime.datetime.now() - start_time).total_seconds()
            active_logger.end_func(func.__name__, result, execution_time)
            return result

        return wrapper

    return decorator


debug_logger = DebugLogger()
