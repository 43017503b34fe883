# ==============================================================================
# REPOSITORIO BASE - Almacenamiento en archivos JSON
# ==============================================================================
# Cada repositorio concreto guarda una colección en un único archivo JSON
# dentro del directorio de datos. Dos formas de colección:
#
#   DictRepository  -> {"<id>": {...}}   productos, banners, ajustes
#   ListRepository  -> [{...}, {...}]    pedidos, auditoría
#
# Escritura todo-o-nada: se vuelca a un temporal del mismo directorio y
# se sustituye el archivo con os.replace. Un fallo de disco se traduce a
# TransientStoreError y el archivo queda como estaba.
# ==============================================================================

import copy
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from catalog_admin.errors import TransientStoreError


class BaseRepository(ABC):
    """
    Acceso serializado a un archivo JSON.

    Todas las instancias comparten un RLock, de modo que una lectura
    nunca ve un archivo a medio sustituir dentro del mismo proceso.
    """

    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        """
        Args:
            file_path: Ruta del archivo JSON (se crea vacío si falta)
        """
        self.file_path = file_path
        if not os.path.exists(self.file_path):
            self._write_raw(self._empty_data())

    @property
    def file_name(self) -> str:
        return os.path.basename(self.file_path)

    @abstractmethod
    def _empty_data(self) -> Any:
        """Colección vacía con la forma que espera el repositorio."""

    def _read_raw(self) -> Any:
        """
        Devuelve el contenido decodificado del archivo.

        Un archivo ausente o con JSON inválido cuenta como colección vacía;
        cualquier otro error de E/S se propaga como TransientStoreError.
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (FileNotFoundError, ValueError):
                return self._empty_data()
            except OSError as e:
                raise TransientStoreError(f"Lectura fallida de {self.file_name}: {e}") from e

    def _write_raw(self, data: Any) -> None:
        """Sustituye el archivo completo por `data`."""
        directory = os.path.dirname(self.file_path) or '.'
        with self._file_lock:
            tmp_path = None
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(prefix=self.file_name + '.', suffix='.tmp',
                                                dir=directory)
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self.file_path)
            except OSError as e:
                if tmp_path and os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise TransientStoreError(f"Escritura fallida de {self.file_name}: {e}") from e

    def reload(self) -> None:
        """Descarta cachés propias (las subclases sin caché no hacen nada)."""


class DictRepository(BaseRepository):
    """Colección indexada por ID."""

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        data = self._read_raw()
        return data if isinstance(data, dict) else {}

    def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        return self.get_all().get(str(record_id))

    def save_all(self, data: Dict[str, Any]) -> None:
        self._write_raw(data)

    def put(self, record_id: str, record_data: Dict[str, Any]) -> None:
        """Inserta o reemplaza el registro `record_id`."""
        with self._file_lock:
            data = copy.deepcopy(self.get_all())
            data[str(record_id)] = record_data
            self._write_raw(data)

    def delete(self, record_id: str) -> Optional[Dict[str, Any]]:
        """
        Quita un registro.

        Returns:
            El registro quitado, o None si no existía (sin escribir)
        """
        with self._file_lock:
            data = copy.deepcopy(self.get_all())
            removed = data.pop(str(record_id), None)
            if removed is not None:
                self._write_raw(data)
            return removed


class ListRepository(BaseRepository):
    """Colección ordenada; los registros llevan su propio campo `id`."""

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        self._write_raw(data)

    def append(self, record: Dict[str, Any]) -> None:
        with self._file_lock:
            self._write_raw(self.get_all() + [record])

    def find_by(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        return next((r for r in self.get_all() if r.get(field) == value), None)

    def _matching(self, field: str, value: Any) -> Callable[[Dict[str, Any]], bool]:
        return lambda record: record.get(field) == value

    def update_where(self, field: str, value: Any, updates: Dict[str, Any]) -> bool:
        """
        Aplica `updates` a cada registro con `field == value`.

        Returns:
            False si ninguno coincidía (y no se escribe nada)
        """
        matches = self._matching(field, value)
        with self._file_lock:
            data = self.get_all()
            hits = [record for record in data if matches(record)]
            for record in hits:
                record.update(updates)
            if hits:
                self._write_raw(data)
            return bool(hits)

    def delete_where(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """Quita el primer registro con `field == value` y lo devuelve."""
        matches = self._matching(field, value)
        with self._file_lock:
            data = self.get_all()
            for index, record in enumerate(data):
                if matches(record):
                    del data[index]
                    self._write_raw(data)
                    return record
            return None
