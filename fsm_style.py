from PySide6.QtGui import QColor


class CanvasStyle:
    """Цвета холста для светлой и тёмной темы.

    Передаётся в виджет явно; геометрия и модель о цветах ничего не знают.
    """

    def __init__(self, dark_mode: bool = False):
        self.dark_mode = dark_mode

    def _pick(self, light, dark) -> QColor:
        return QColor(*dark) if self.dark_mode else QColor(*light)

    def background(self) -> QColor:
        return self._pick((255, 255, 255), (24, 26, 32))

    def state_fill(self) -> QColor:
        return self._pick((240, 244, 248), (50, 58, 70))

    def state_stroke(self) -> QColor:
        return self._pick((64, 64, 64), (220, 224, 232))

    def text(self) -> QColor:
        return self._pick((20, 20, 20), (235, 238, 243))

    def anchor(self) -> QColor:
        return self._pick((60, 100, 160), (120, 170, 230))

    def edge(self) -> QColor:
        return self._pick((0, 0, 0), (230, 235, 245))

    def label_background(self) -> QColor:
        return self._pick((255, 255, 230), (56, 60, 70))

    def label_border(self) -> QColor:
        return self._pick((64, 64, 64), (190, 195, 205))

    def button(self, hover: bool) -> QColor:
        return QColor(80, 120, 200) if hover else QColor(100, 140, 220)

    def rubber_band(self) -> QColor:
        return QColor(50, 90, 200, 180)
