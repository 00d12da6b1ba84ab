"""
Directory - Storage Backends

Stockages clé-valeur : mémoire (tests, processus unique) et fichier JSON
(persistance entre redémarrages).
"""

import copy
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from .interfaces import IStorageBackend


class StorageBackendError(Exception):
    """Erreur d'accès au stockage sous-jacent."""

    pass


class MemoryBackend(IStorageBackend):
    """
    Stockage en mémoire.

    Les valeurs sont copiées en entrée et en sortie : un appelant ne peut
    pas modifier le contenu stocké par référence.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Optional[Any]:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def put(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())

    def clear(self) -> None:
        """Vide le stockage (pour tests)."""
        self._data.clear()


class JsonFileBackend(IStorageBackend):
    """
    Stockage dans un unique fichier JSON (objet clé → valeur).

    Écriture atomique : fichier temporaire puis remplacement.
    Dernier écrivain gagnant si le fichier est partagé entre processus.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> bool:
        with self._lock:
            data = self._read()
            if key not in data:
                return False
            del data[key]
            self._write(data)
            return True

    def keys(self) -> Iterable[str]:
        return list(self._read().keys())

    def _read(self) -> Dict[str, Any]:
        """
        Lit le fichier complet.

        Raises:
            StorageBackendError: Fichier illisible ou JSON invalide
        """
        if not self._path.exists():
            return {}

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise StorageBackendError(f"Lecture impossible {self._path}: {e}")

        if not content.strip():
            return {}

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageBackendError(f"JSON invalide dans {self._path}: {e}")

        if not isinstance(data, dict):
            raise StorageBackendError(f"{self._path} doit contenir un objet JSON")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self._path.parent), suffix=".tmp")
        except OSError as e:
            raise StorageBackendError(f"Écriture impossible {self._path}: {e}")

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2, default=str)
            os.replace(tmp_path, self._path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageBackendError(f"Écriture impossible {self._path}: {e}")
