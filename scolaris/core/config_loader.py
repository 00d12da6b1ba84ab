"""
SCOLARIS - Config Loader Implementation
Charge la configuration d'authentification depuis un fichier YAML.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .interfaces import AuthSettings, IConfigLoader


class ConfigIntegrityError(Exception):
    """Erreur d'intégrité de configuration."""

    pass


class ConfigLoader(IConfigLoader):
    """Chargement de la configuration depuis fichier YAML (section `auth`)."""

    SECTION: str = "auth"

    def __init__(self, config_path: Union[str, Path] = "config/auth.yaml"):
        self.config_path = Path(config_path)

    def load(self, path: Optional[Union[str, Path]] = None) -> AuthSettings:
        """
        Charge la configuration.

        Args:
            path: Fichier à lire (défaut: chemin du constructeur)

        Returns:
            Paramètres validés

        Raises:
            ConfigIntegrityError: Si fichier inexistant ou structure invalide
        """
        config_file = Path(path) if path is not None else self.config_path

        if not config_file.exists():
            raise ConfigIntegrityError(f"Configuration non trouvée: {config_file}")

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigIntegrityError(f"Erreur de parsing YAML: {e}")
        except OSError as e:
            raise ConfigIntegrityError(f"Erreur de lecture fichier: {e}")

        return self.from_dict(raw if raw is not None else {})

    def from_dict(self, raw: Any) -> AuthSettings:
        """
        Valide un dictionnaire de configuration déjà chargé.

        Raises:
            ConfigIntegrityError: Structure ou valeurs invalides
        """
        if not isinstance(raw, dict):
            raise ConfigIntegrityError("Configuration doit être un objet YAML")

        section = raw.get(self.SECTION, {})
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise ConfigIntegrityError(f"{self.SECTION} doit être un objet")

        try:
            return AuthSettings(**section)
        except ValidationError as e:
            raise ConfigIntegrityError(f"Configuration invalide: {self._summarize(e)}")

    @staticmethod
    def _summarize(error: ValidationError) -> str:
        """Résumé lisible des erreurs pydantic."""
        messages = []
        for item in error.errors():
            location = ".".join(str(part) for part in item.get("loc", ()))
            messages.append(f"{location}: {item.get('msg')}")
        return "; ".join(messages)

    @staticmethod
    def defaults() -> Dict[str, Any]:
        """Valeurs par défaut, utiles pour générer un fichier initial."""
        return {ConfigLoader.SECTION: AuthSettings().model_dump()}
