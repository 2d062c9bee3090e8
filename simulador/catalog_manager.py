# simulador/catalog_manager.py
from __future__ import annotations

import threading
from typing import Callable

from .config import RECORDING_CATEGORY
from .dataio import CatalogLoadError, cargar_precios, cargar_soluciones
from .models import Catalogo, PriceRow, SolutionDef
from .logging_setup import get_logger

log = get_logger(__name__)

CatalogListener = Callable[[Catalogo], None]


def _etiquetar(loader: Callable[[str], list], ruta: str, catalogo: str) -> list:
    """Ejecuta el loader marcando en el error qué catálogo falló."""
    try:
        return loader(ruta)
    except CatalogLoadError as e:
        if e.catalogo is None:
            e.catalogo = catalogo
        raise


class CatalogManager:
    """
    Fuente única de verdad del catálogo en runtime.

    Carga una vez y sirve muchas: el primer pedido (o el primero tras un
    fallo) ejecuta el loader; luego se devuelve lo que quedó en memoria.
    Los valores publicados son tuplas de dataclasses congeladas, así que
    varios pedidos concurrentes pueden leerlos sin copiar.
    Los errores del loader se propagan tal cual: nunca se sirve un
    catálogo vacío en lugar de uno que no se pudo leer.
    """

    def __init__(
        self,
        ruta_precios: str,
        ruta_soluciones: str,
        categoria_grabacion: str = RECORDING_CATEGORY,
        loader_precios: Callable[[str], list[PriceRow]] = cargar_precios,
        loader_soluciones: Callable[[str], list[SolutionDef]] = cargar_soluciones,
    ):
        self.ruta_precios = ruta_precios
        self.ruta_soluciones = ruta_soluciones
        self.categoria_grabacion = categoria_grabacion
        self._loader_precios = loader_precios
        self._loader_soluciones = loader_soluciones
        self._lock = threading.Lock()
        self._precios: tuple[PriceRow, ...] | None = None
        self._soluciones: tuple[SolutionDef, ...] | None = None
        self._listeners: list[CatalogListener] = []

    @classmethod
    def desde_config(cls) -> "CatalogManager":
        from .paths import PRECIOS_PATH, SOLUCIONES_PATH
        return cls(PRECIOS_PATH, SOLUCIONES_PATH)

    # ---------- lectura ----------
    # Los _cargar_* se llaman con el lock tomado
    def _cargar_precios(self) -> tuple[PriceRow, ...]:
        if self._precios is None:
            self._precios = tuple(_etiquetar(self._loader_precios, self.ruta_precios, "precios"))
        return self._precios

    def _cargar_soluciones(self) -> tuple[SolutionDef, ...]:
        if self._soluciones is None:
            self._soluciones = tuple(_etiquetar(self._loader_soluciones, self.ruta_soluciones, "soluciones"))
        return self._soluciones

    def precios(self) -> tuple[PriceRow, ...]:
        with self._lock:
            return self._cargar_precios()

    def soluciones(self) -> tuple[SolutionDef, ...]:
        with self._lock:
            return self._cargar_soluciones()

    def catalogo(self) -> Catalogo:
        """Foto de ambos catálogos tomada bajo un único lock."""
        with self._lock:
            return Catalogo(
                precios=self._cargar_precios(),
                soluciones=self._cargar_soluciones(),
                categoria_grabacion=self.categoria_grabacion,
            )

    @property
    def cargado(self) -> bool:
        return self._precios is not None and self._soluciones is not None

    # ---------- ciclo de vida ----------
    def invalidar(self) -> None:
        """Olvida lo cargado; el próximo pedido vuelve a leer los archivos."""
        with self._lock:
            self._precios = None
            self._soluciones = None
        log.info("Caché de catálogos invalidada")

    def recargar(self) -> Catalogo:
        """
        Relee ambos archivos y, si los dos cargan bien, reemplaza el caché y
        avisa a los suscriptores. Si falla, el caché anterior queda intacto.
        """
        precios = tuple(_etiquetar(self._loader_precios, self.ruta_precios, "precios"))
        soluciones = tuple(_etiquetar(self._loader_soluciones, self.ruta_soluciones, "soluciones"))
        with self._lock:
            self._precios = precios
            self._soluciones = soluciones
        cat = Catalogo(precios, soluciones, self.categoria_grabacion)
        for cb in list(self._listeners):
            try:
                cb(cat)
            except Exception:
                log.exception("Fallo notificando recarga de catálogo")
        return cat

    def on_update(self, callback: CatalogListener) -> None:
        self._listeners.append(callback)
