"""
Модуль для сохранения и загрузки размещений диаграмм автоматов.
"""
import json
import os
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtCore import QPointF

from fsm_format import format_definition
from fsm_logging import log_event
from fsm_model import StateGraph


def get_user_data_dir() -> Path:
    """
    Возвращает путь к пользовательской директории для сохранения данных.
    Использует AppData\\Local для Windows, чтобы избежать проблем с правами доступа.
    """
    if os.name == 'nt':  # Windows
        appdata = os.getenv('LOCALAPPDATA')
        if appdata:
            return Path(appdata) / "FsmCanvas" / "saved_layouts"
        return Path.home() / "FsmCanvas" / "saved_layouts"
    # Linux/Mac
    return Path.home() / ".fsmcanvas" / "saved_layouts"


class FsmLayoutSave:
    """Сохранение описания автомата вместе с позициями состояний."""

    def __init__(self, save_dir: str = None):
        """
        Args:
            save_dir: Путь к директории сохранений. Если None, используется
                     пользовательская директория (AppData для Windows).
        """
        self.save_dir = Path(save_dir) if save_dir is not None else get_user_data_dir()
        self.save_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self.save_dir / f"{name}.json"

    def save_layout(self, name: str, graph: StateGraph) -> bool:
        """
        Сохраняет текст описания и позиции состояний.

        Returns:
            True если успешно сохранено
        """
        data = {
            "name": name,
            "definition": format_definition(graph),
            "positions": {
                s.name: {"x": float(s.position.x()), "y": float(s.position.y())}
                for s in graph.states
            },
        }
        try:
            with open(self._path(name), 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            log_event(f"Ошибка при сохранении размещения '{name}': {e}")
            return False
        log_event(f"Размещение '{name}' сохранено.")
        return True

    def load_layout(self, name: str) -> Optional[Dict]:
        """
        Загружает сохраненное размещение.

        Returns:
            Словарь {"name", "definition", "positions": {имя: QPointF}} или None
        """
        path = self._path(name)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            data["positions"] = {
                state_name: QPointF(pos["x"], pos["y"])
                for state_name, pos in data.get("positions", {}).items()
            }
            data.setdefault("definition", "")
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            log_event(f"Ошибка при загрузке размещения '{name}': {e}")
            return None
        return data

    def list_saved(self) -> List[str]:
        """Возвращает отсортированный список имён сохранений."""
        try:
            return sorted(p.stem for p in self.save_dir.glob("*.json"))
        except OSError as e:
            log_event(f"Ошибка при получении списка сохранений: {e}")
            return []

    def delete_saved(self, name: str) -> bool:
        path = self._path(name)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            log_event(f"Ошибка при удалении '{name}': {e}")
            return False
        return True
