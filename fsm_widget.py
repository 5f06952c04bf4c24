from PySide6.QtWidgets import QWidget, QMenu, QMessageBox, QInputDialog, QLineEdit
from PySide6.QtGui import QPainter, QPen, QBrush, QColor, QPolygonF
from PySide6.QtCore import Qt, QPointF, QRectF, Signal

from fsm_controller import (
    CanvasController,
    DefinitionChanged,
    PointerButton,
    Repaint,
    RequestLabel,
    ShowError,
    ShowMenu,
)
from fsm_geometry import (
    ADD_BUTTON_HEIGHT,
    ADD_BUTTON_WIDTH,
    ANCHOR_SIZE,
    STATE_RADIUS,
    Anchor,
    anchor_position,
    arrowhead,
)
from fsm_style import CanvasStyle


class FsmCanvasWidget(QWidget):
    """
    Холст для построения диаграммы конечного автомата.

    - состояния рисуются как круги с четырьмя точками привязки
    - переходы — кривые Безье со стрелками и подписями
    - перетаскивание от точки привязки к точке привязки создаёт переход
    - правая кнопка мыши открывает контекстное меню
    """

    definitionChanged = Signal(str)

    def __init__(self, controller=None, style=None, parent=None):
        super().__init__(parent)
        self.controller = controller if controller is not None else CanvasController()
        self.style_provider = style if style is not None else CanvasStyle()
        self.setMinimumSize(400, 300)
        self.setMouseTracking(True)

    def set_style(self, style: CanvasStyle):
        self.style_provider = style
        self.update()

    def load_text(self, text: str):
        self._apply(self.controller.load_text(text))

    def auto_arrange(self):
        self._apply(self.controller.auto_arrange())

    def restore_positions(self, positions):
        self._apply(self.controller.restore_positions(positions))

    # --- Исполнение эффектов контроллера ---

    def _apply(self, effects):
        for effect in effects:
            if isinstance(effect, Repaint):
                self.update()
            elif isinstance(effect, DefinitionChanged):
                self.definitionChanged.emit(effect.text)
            elif isinstance(effect, ShowError):
                QMessageBox.critical(self, effect.title, effect.message)
            elif isinstance(effect, RequestLabel):
                text, ok = QInputDialog.getText(self, "Переход", effect.title, QLineEdit.Normal, effect.default)
                self._apply(self.controller.submit_label(text if ok else None))
            elif isinstance(effect, ShowMenu):
                self._show_menu(effect)

    def _show_menu(self, effect: ShowMenu):
        menu = QMenu(self)
        c = self.controller

        if effect.kind == "state":
            state = effect.target
            start_action = menu.addAction("Начальное состояние")
            start_action.setCheckable(True)
            start_action.setChecked(state.is_start)
            start_action.triggered.connect(lambda checked=False: self._apply(c.set_start(state)))

            final_action = menu.addAction("Конечное состояние")
            final_action.setCheckable(True)
            final_action.setChecked(state.is_final)
            final_action.triggered.connect(lambda checked=False: self._apply(c.toggle_final(state)))

            menu.addSeparator()
            loop_action = menu.addAction("Добавить петлю")
            loop_action.triggered.connect(lambda checked=False: self._apply(c.request_self_loop(state)))
            menu.addSeparator()
            delete_action = menu.addAction("Удалить состояние")
            delete_action.triggered.connect(lambda checked=False: self._apply(c.delete_state(state)))
        elif effect.kind == "transition":
            transition = effect.target
            edit_action = menu.addAction("Изменить переход")
            edit_action.triggered.connect(
                lambda checked=False: self._apply(c.request_edit_transition(transition))
            )
            delete_action = menu.addAction("Удалить переход")
            delete_action.triggered.connect(lambda checked=False: self._apply(c.delete_transition(transition)))
        else:
            pos = QPointF(effect.position)
            add_action = menu.addAction("Добавить состояние")
            add_action.triggered.connect(lambda checked=False: self._apply(c.add_state_at(pos)))

        menu.exec(self.mapToGlobal(effect.position.toPoint()))

    # --- Рисование ---

    def paintEvent(self, event):
        self.controller.set_viewport(self.width(), self.height())
        st = self.style_provider

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), st.background())

        # 1. Переходы (под состояниями)
        for t in self.controller.graph.transitions:
            self._draw_transition(painter, t)

        # 2. Состояния
        for s in self.controller.graph.states:
            self._draw_state(painter, s)

        # 3. Предпросмотр новой дуги
        band = self.controller.rubber_band()
        if band is not None:
            state, anchor, cursor = band
            pen = QPen(st.rubber_band(), 2, Qt.DashLine, Qt.RoundCap, Qt.RoundJoin)
            painter.setPen(pen)
            painter.drawLine(anchor_position(state, anchor), cursor)

        # 4. Кнопка "добавить состояние" на пустом холсте
        self._draw_add_button(painter)
        painter.end()

    def _fill_triangle(self, painter, triangle, color):
        painter.setPen(QPen(color, 1))
        painter.setBrush(QBrush(color))
        painter.drawPolygon(QPolygonF(list(triangle)))
        painter.setBrush(Qt.NoBrush)

    def _draw_state(self, painter, s):
        st = self.style_provider
        r = STATE_RADIUS
        center = s.position

        painter.setPen(QPen(st.state_stroke(), 2))
        painter.setBrush(QBrush(st.state_fill()))
        painter.drawEllipse(center, r, r)
        painter.setBrush(Qt.NoBrush)
        if s.is_final:
            painter.drawEllipse(center, r - 5, r - 5)
        if s.is_start:
            tail = QPointF(center.x() - r - 30, center.y())
            tip = QPointF(center.x() - r, center.y())
            painter.drawLine(tail, tip)
            self._fill_triangle(painter, arrowhead(tip, 0.0), st.state_stroke())

        # Подпись состояния
        painter.setPen(st.text())
        painter.drawText(QRectF(center.x() - r, center.y() - r, 2 * r, 2 * r), Qt.AlignCenter, s.name)

        # Точки привязки
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(st.anchor()))
        for anchor in Anchor:
            painter.drawEllipse(anchor_position(s, anchor), ANCHOR_SIZE / 2, ANCHOR_SIZE / 2)
        painter.setBrush(Qt.NoBrush)

    def _draw_transition(self, painter, t):
        st = self.style_provider
        curve = self.controller.graph.curve_for(t)

        painter.setPen(QPen(st.edge(), 2.2 if t.is_self_loop else 2))
        painter.setBrush(Qt.NoBrush)
        painter.drawPath(curve.to_path())

        self._fill_triangle(painter, curve.arrow(), st.edge())

        self._draw_label(painter, ",".join(t.labels), curve.label_position())

    def _draw_label(self, painter, text, pos):
        st = self.style_provider
        fm = painter.fontMetrics()
        w = fm.horizontalAdvance(text)
        h = fm.height()
        rect = QRectF(pos.x() - w / 2 - 4, pos.y() - h + 2, w + 8, h)

        painter.setPen(QPen(st.label_border(), 1))
        painter.setBrush(QBrush(st.label_background()))
        painter.drawRoundedRect(rect, 4, 4)
        painter.setBrush(Qt.NoBrush)
        painter.setPen(st.text())
        painter.drawText(rect, Qt.AlignCenter, text)

    def _draw_add_button(self, painter):
        center = self.controller.add_button_position()
        if center is None:
            return
        rect = QRectF(
            center.x() - ADD_BUTTON_WIDTH / 2,
            center.y() - ADD_BUTTON_HEIGHT / 2,
            ADD_BUTTON_WIDTH,
            ADD_BUTTON_HEIGHT,
        )
        painter.setBrush(QBrush(self.style_provider.button(self.controller.hover_add_button)))
        painter.setPen(QPen(QColor(Qt.white), 2))
        painter.drawRoundedRect(rect, 5, 5)
        painter.drawText(rect, Qt.AlignCenter, "Добавить")
        painter.setBrush(Qt.NoBrush)

    # --- Обработка мыши ---

    def mousePressEvent(self, event):
        """Нажатие: перетаскивание, начало дуги или контекстное меню."""
        if event.button() == Qt.LeftButton:
            button = PointerButton.LEFT
        elif event.button() == Qt.RightButton:
            button = PointerButton.RIGHT
        else:
            return
        self._apply(self.controller.press(event.position(), button))

    def mouseMoveEvent(self, event):
        self._apply(self.controller.move(event.position()))

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._apply(self.controller.release(event.position()))

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.controller.set_viewport(self.width(), self.height())
        self.update()
