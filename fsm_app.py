from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QMessageBox,
    QFileDialog,
    QInputDialog,
    QLabel,
    QPlainTextEdit,
    QSizePolicy,
    QCheckBox,
)

from fsm_controller import CanvasController
from fsm_logging import log_event, log_state_snapshot
from fsm_save import FsmLayoutSave
from fsm_style import CanvasStyle
from fsm_widget import FsmCanvasWidget

EXAMPLE_DEFINITION = (
    "Start: q0\n"
    "Finals: q1\n"
    "States: q0 q1\n"
    "\n"
    "Transitions:\n"
    "q0 -> q1 (a)\n"
    "q1 -> q1 (b)\n"
)


class FsmEditorApp(QMainWindow):
    """Главное окно: холст автомата и синхронизированный текст описания."""

    def __init__(self, initial_text: str = EXAMPLE_DEFINITION, saves: FsmLayoutSave = None):
        super().__init__()
        self.setWindowTitle("Редактор конечных автоматов")
        self.setGeometry(100, 100, 1000, 700)

        self.controller = CanvasController()
        self.saves = saves if saves is not None else FsmLayoutSave()

        self._setup_ui()
        self._apply_text(initial_text)

    # --- Построение интерфейса ---

    def _setup_ui(self):
        central_widget = QWidget()
        main_layout = QHBoxLayout(central_widget)

        # Левая панель с кнопками
        controls_widget = QWidget()
        controls_layout = QVBoxLayout(controls_widget)
        controls_widget.setFixedWidth(220)

        self.canvas = FsmCanvasWidget(self.controller)
        self.canvas.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.canvas.definitionChanged.connect(self._on_definition_changed)

        btn_load = QPushButton("1. Загрузить из файла")
        btn_load.clicked.connect(self._load_from_file)

        btn_save = QPushButton("2. Сохранить в файл")
        btn_save.clicked.connect(self._save_to_file)

        btn_apply = QPushButton("3. Применить текст")
        btn_apply.clicked.connect(lambda: self._apply_text(self.editor.toPlainText()))

        btn_arrange = QPushButton("4. Авто-раскладка")
        btn_arrange.clicked.connect(self.canvas.auto_arrange)

        btn_save_layout = QPushButton("Сохранить размещение")
        btn_save_layout.clicked.connect(self._save_layout)

        btn_load_layout = QPushButton("Загрузить размещение")
        btn_load_layout.clicked.connect(self._load_layout)

        self.dark_check = QCheckBox("Тёмная тема")
        self.dark_check.toggled.connect(lambda on: self.canvas.set_style(CanvasStyle(dark_mode=on)))

        controls_layout.addWidget(btn_load)
        controls_layout.addWidget(btn_save)
        controls_layout.addWidget(btn_apply)
        controls_layout.addWidget(btn_arrange)
        controls_layout.addSpacing(20)
        controls_layout.addWidget(btn_save_layout)
        controls_layout.addWidget(btn_load_layout)
        controls_layout.addSpacing(20)
        controls_layout.addWidget(self.dark_check)
        controls_layout.addStretch(1)

        main_layout.addWidget(controls_widget)

        # Холст сверху, текст описания снизу
        self.editor = QPlainTextEdit()
        self.editor.setMinimumHeight(160)
        self.editor.setMaximumHeight(260)

        main_content = QVBoxLayout()
        main_content.addWidget(self.canvas, stretch=3)
        main_content.addWidget(QLabel("Описание автомата:"))
        main_content.addWidget(self.editor, stretch=1)

        main_layout.addLayout(main_content, stretch=1)
        self.setCentralWidget(central_widget)

    # --- Синхронизация холста и текста ---

    def _on_definition_changed(self, text: str):
        self.editor.blockSignals(True)
        self.editor.setPlainText(text)
        self.editor.blockSignals(False)

    def _apply_text(self, text: str):
        """Перестраивает холст по тексту; текст заменяется нормализованным."""
        self.canvas.load_text(text)
        self._on_definition_changed(self.controller.definition())

    # --- Слоты для кнопок ---

    def _load_from_file(self):
        file_name, _ = QFileDialog.getOpenFileName(
            self,
            "Выберите файл с описанием автомата",
            "",
            "Текстовые файлы (*.txt);;Все файлы (*.*)",
        )
        if not file_name:
            return

        try:
            with open(file_name, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            QMessageBox.critical(self, "Ошибка", f"Не удалось прочитать файл:\n{file_name}\n{e}")
            return

        log_event(f"Автомат загружен из файла '{file_name}'.")
        self._apply_text(text)

    def _save_to_file(self):
        file_name, _ = QFileDialog.getSaveFileName(
            self,
            "Сохранить описание автомата",
            "automaton.txt",
            "Текстовые файлы (*.txt);;Все файлы (*.*)",
        )
        if not file_name:
            return

        try:
            with open(file_name, "w", encoding="utf-8") as f:
                f.write(self.controller.definition())
        except OSError as e:
            QMessageBox.critical(self, "Ошибка", f"Не удалось сохранить файл: {e}")
            return
        log_state_snapshot(f"Автомат сохранён в файл '{file_name}'", self.controller.graph)

    def _save_layout(self):
        name, ok = QInputDialog.getText(self, "Сохранить размещение", "Имя сохранения:")
        if not ok or not name.strip():
            return
        if not self.saves.save_layout(name.strip(), self.controller.graph):
            QMessageBox.critical(self, "Ошибка", f"Не удалось сохранить размещение '{name}'.")

    def _load_layout(self):
        names = self.saves.list_saved()
        if not names:
            QMessageBox.information(self, "Размещения", "Нет сохранённых размещений.")
            return
        name, ok = QInputDialog.getItem(self, "Загрузить размещение", "Сохранение:", names, 0, False)
        if not ok:
            return

        data = self.saves.load_layout(name)
        if data is None:
            QMessageBox.critical(self, "Ошибка", f"Не удалось загрузить размещение '{name}'.")
            return
        self._apply_text(data["definition"])
        self.canvas.restore_positions(data["positions"])
