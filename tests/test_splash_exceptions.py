"""Tests pour les exceptions personnalisées de splash-assembler."""

import pytest

from splash.splash_exceptions import (
    AssemblyIOError,
    DescriptorParsingError,
    SplashConfigError,
    SplashError,
    SplashValidationError,
    ThemeNotFoundError,
)


class TestSplashError:
    """Tests pour l'exception de base SplashError."""

    def test_splash_error_basic(self):
        error = SplashError("Test error")
        assert str(error) == "Test error"
        assert isinstance(error, Exception)

    def test_inheritance(self):
        """Toutes les exceptions héritent de SplashError."""
        exceptions = [
            SplashConfigError("config"),
            ThemeNotFoundError("bgrt"),
            SplashValidationError("validation"),
            DescriptorParsingError("parsing"),
            AssemblyIOError("io"),
        ]

        for exc in exceptions:
            assert isinstance(exc, SplashError)


class TestThemeNotFoundError:
    """Tests pour ThemeNotFoundError."""

    def test_message_names_theme_and_option(self):
        error = ThemeNotFoundError("breeze", option="theme")
        assert "The requested theme: breeze is not provided by any of the packages in theme_packages" in str(error)
        assert "'theme'" in str(error)
        assert error.theme == "breeze"
        assert error.option == "theme"

    def test_is_config_error(self):
        with pytest.raises(SplashConfigError):
            raise ThemeNotFoundError("breeze")


class TestAssemblyIOError:
    """Tests pour AssemblyIOError."""

    def test_without_context(self):
        error = AssemblyIOError("Écriture échouée")
        assert str(error) == "Écriture échouée"
        assert error.path is None
        assert error.environment is None

    def test_with_context(self):
        error = AssemblyIOError("Écriture échouée", path="/out/initrd", environment="minimal")
        assert str(error) == "Écriture échouée | Environnement: minimal | Chemin: /out/initrd"
