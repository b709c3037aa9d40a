"""Module d'exceptions personnalisées pour splash-assembler.

Fournit une hiérarchie d'exceptions spécifiques pour distinguer les erreurs de
configuration (fatales, à corriger par l'opérateur) des erreurs d'écriture.
"""

from __future__ import annotations


class SplashError(Exception):
    """Exception de base pour toutes les erreurs de splash-assembler.

    Permet de capturer toutes les erreurs métier avec `except SplashError`.

    Example:
        try:
            builder.build(selection)
        except SplashError as e:
            logger.error(f"Assemblage impossible: {e}")
    """


class SplashConfigError(SplashError):
    """Erreur de configuration fournie par l'opérateur.

    Levée lorsque la sélection ou le contexte de build ne permet pas de
    produire une arborescence (chemins incohérents, fichier de sélection
    illisible, etc.).
    """


class ThemeNotFoundError(SplashConfigError):
    """Le thème sélectionné n'est fourni par aucun paquet indexé.

    Attributes:
        theme: Nom du thème demandé
        option: Nom de l'option de sélection qui le désigne

    Example:
        if theme_name not in index:
            raise ThemeNotFoundError(theme_name)
    """

    def __init__(self, theme: str, option: str = "theme"):
        """Initialise ThemeNotFoundError.

        Args:
            theme: Nom du thème introuvable
            option: Option de sélection qui désigne ce thème
        """
        super().__init__(
            f"The requested theme: {theme} is not provided by any of the packages in theme_packages "
            f"(option '{option}')"
        )
        self.theme = theme
        self.option = option


class SplashValidationError(SplashError):
    """Valeur de sélection invalide.

    Example:
        if show_delay < timedelta(0):
            raise SplashValidationError("ShowDelay doit être >= 0")
    """


class DescriptorParsingError(SplashError):
    """Descripteur de thème (.plymouth) illisible ou incomplet.

    Levée lors de la découverte d'un thème; l'index ignore alors ce thème.
    """


class AssemblyIOError(SplashError):
    """Échec de copie ou d'écriture pendant l'assemblage d'une arborescence.

    Attributes:
        path: Chemin concerné (optionnel)
        environment: Environnement cible en cours d'assemblage (optionnel)
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        environment: str | None = None,
    ):
        """Initialise AssemblyIOError avec le contexte de l'échec.

        Args:
            message: Message d'erreur descriptif
            path: Chemin en cause (optionnel)
            environment: Environnement cible (optionnel)
        """
        super().__init__(message)
        self.path = path
        self.environment = environment

    def __str__(self) -> str:
        """Représentation textuelle enrichie de l'erreur."""
        parts = [super().__str__()]
        if self.environment:
            parts.append(f"Environnement: {self.environment}")
        if self.path:
            parts.append(f"Chemin: {self.path}")
        return " | ".join(parts)
