import sys

from PySide6.QtWidgets import QApplication

from fsm_app import FsmEditorApp, EXAMPLE_DEFINITION
from fsm_logging import init_log


def main():
    """Точка входа в редактор диаграмм конечных автоматов."""
    # Инициализируем лог (перезаписываем log.txt на новый запуск)
    init_log()

    # Файл из аргумента командной строки, иначе пример
    initial_text = EXAMPLE_DEFINITION
    if len(sys.argv) > 1:
        try:
            with open(sys.argv[1], "r", encoding="utf-8") as f:
                initial_text = f.read()
        except OSError as e:
            print(f"Не удалось прочитать файл {sys.argv[1]}: {e}")

    app = QApplication(sys.argv)
    window = FsmEditorApp(initial_text)
    window.show()
    app.exec()


if __name__ == "__main__":
    main()
