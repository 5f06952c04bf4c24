import datetime
import atexit

from fsm_model import StateGraph
from fsm_format import format_definition

LOG_FILE = "log.txt"


def _timestamp() -> str:
    return datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def init_log() -> None:
    """Очищает/создаёт файл логов для нового запуска программы."""
    try:
        with open(LOG_FILE, "w", encoding="utf-8") as f:
            f.write(f"[{_timestamp()}] Запуск редактора конечных автоматов\n")
    except OSError:
        # Лог недоступен — не мешаем работе приложения
        pass


def log_event(message: str) -> None:
    """Добавляет строку в лог-файл с временной меткой."""
    try:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(f"[{_timestamp()}] {message}\n")
    except OSError:
        pass


def log_state_snapshot(label: str, graph: StateGraph) -> None:
    """Записывает в лог текстовое описание автомата на текущий момент."""
    try:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(
                f"[{_timestamp()}] {label} "
                f"(состояний: {len(graph.states)}, переходов: {len(graph.transitions)})\n"
            )
            f.write(format_definition(graph))
            f.write("\n")
    except OSError:
        pass


def _log_on_exit() -> None:
    log_event("Приложение завершено.")


atexit.register(_log_on_exit)
