import os, shutil, tempfile
import pytest

# Antes de importar simulador: los logs de las pruebas van a un directorio temporal
_LOG_DIR = tempfile.mkdtemp(prefix="simulador-logs-")
os.environ["LOG_DIR"] = _LOG_DIR
os.environ["LOG_LEVEL"] = "DEBUG"

from simulador.models import Catalogo, PriceRow, SolutionDef, ComponentCost  # noqa: E402
from simulador.catalog_manager import CatalogManager  # noqa: E402

GRAB = "GRABACIÓN DE VIDEO EN LA NUBE"


@pytest.fixture(autouse=True, scope="session")
def _init_logging_for_tests(tmp_path_factory):
    log_dir = tmp_path_factory.mktemp("logs")
    from simulador.logging_setup import init_logging
    init_logging(level="DEBUG", log_dir=str(log_dir))

    yield
    shutil.rmtree(_LOG_DIR, ignore_errors=True)


@pytest.fixture
def precios():
    return (
        PriceRow(id=1, categoria="RECONOCIMIENTO DE PLACAS", servicio="LPR", modalidad="Nube", precio_usd=30.0),
        PriceRow(id=2, categoria="RECONOCIMIENTO FACIAL", servicio="Facial", modalidad="Nube", precio_usd=12.5),
        PriceRow(id=3, categoria="FUEGO Y HUMO", servicio="Detección", modalidad="Nube", precio_usd=8.0),
        PriceRow(id=10, categoria=GRAB, servicio="Grabación", modalidad="7 días", precio_usd=15.0,
                 retencion_imagenes="7 días"),
        PriceRow(id=11, categoria=GRAB, servicio="Grabación", modalidad="30 días", precio_usd=25.0,
                 retencion_imagenes="30 días"),
    )


@pytest.fixture
def soluciones():
    return (
        SolutionDef(
            id="entrada_principal", name="Entrada Principal", etiqueta="Accesos",
            components=(ComponentCost("Servidor", 5.0), ComponentCost("Licencia", 7.0),
                        ComponentCost("Soporte", 3.0, "Mesa de ayuda")),
        ),
        SolutionDef(id="perimetro", name="Perímetro", etiqueta="General",
                    components=(ComponentCost("GPU", 20.0),)),
    )


@pytest.fixture
def catalogo(precios, soluciones):
    return Catalogo(precios=precios, soluciones=soluciones, categoria_grabacion=GRAB)


@pytest.fixture
def manager(precios, soluciones):
    return CatalogManager(
        "precios.xlsx", "soluciones.xlsx",
        categoria_grabacion=GRAB,
        loader_precios=lambda path: list(precios),
        loader_soluciones=lambda path: list(soluciones),
    )
