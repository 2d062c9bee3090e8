# simulador/api.py
"""
API de solo lectura para los catálogos, más cálculo sin estado de la
propuesta que arma el front (nada de lo enviado se guarda).
"""
from __future__ import annotations

import io
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from typing import Any

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from .catalog_manager import CatalogManager
from .carrito import PropuestaInvalida, item_desde_dict, validar_para_imprimir
from .config import APP_CURRENCY, DEFAULT_MARGIN_PCT, get_secondary_currencies
from .dataio import CatalogLoadError
from .models import CameraCartItem, LOCAL
from .pdfgen import generar_pdf, nombre_archivo_propuesta
from .pricing import aggregate_totals, currency_convert, duplicate_flags, simulacion_general
from .utils import nz
from .logging_setup import get_logger

log = get_logger(__name__)

MSG_ERROR_PRECIOS = "Error leyendo archivo de precios"
MSG_ERROR_SOLUCIONES = "Error leyendo archivo de soluciones"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class ItemPropuesta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Tipos laxos: la normalización la hace item_desde_dict
    id: Any = ""
    nombre: Any = ""
    cantidad: Any = 1
    servicios_ids: list[Any] = Field(default_factory=list, alias="selectedServiceIds")
    soluciones_ids: list[Any] = Field(default_factory=list, alias="selectedSolutionIds")
    grabacion: Any = Field(default=LOCAL, alias="selectedRecording")

    def to_item(self) -> CameraCartItem:
        return item_desde_dict(self.model_dump())


class PropuestaRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[ItemPropuesta] = Field(default_factory=list)
    # Ausente => sin margen; el 30 % por defecto lo envía el front explícitamente
    margen_pct: Any = Field(default=None, alias="margenPct")
    moneda: str = APP_CURRENCY
    tasa: Any = 1.0
    cliente: str = ""

    def cart(self) -> list[CameraCartItem]:
        return [i.to_item() for i in self.items]


class SimulacionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    num_camaras: Any = Field(default=10, alias="numCamaras")
    servicios_ids: list[Any] = Field(default_factory=list, alias="selectedServiceIds")
    grabacion: Any = Field(default=LOCAL, alias="selectedRecording")


# ---------------------------------------------------------------------------
# Dependencias / errores
# ---------------------------------------------------------------------------


def get_manager(request: Request) -> CatalogManager:
    return request.app.state.catalogos


def _fallo(message: str, code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    return JSONResponse(status_code=code, content={"message": message})


def _periodos_en(p, tasa) -> dict[str, float]:
    return {k: currency_convert(v, tasa) for k, v in p.to_dict().items()}


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


def create_app(manager: CatalogManager | None = None) -> FastAPI:
    manager = manager or CatalogManager.desde_config()

    @asynccontextmanager
    async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
        # Carga anticipada: si falla, cada pedido reintenta y reporta su error
        try:
            cat = manager.recargar()
            log.info("Catálogos listos: %d precios, %d soluciones", len(cat.precios), len(cat.soluciones))
        except CatalogLoadError:
            log.exception("No se pudieron cargar los catálogos al iniciar")
        yield

    app = FastAPI(title="Simulador de servicios: Cámaras + IA", lifespan=_lifespan)
    app.state.catalogos = manager

    @app.exception_handler(CatalogLoadError)
    async def _catalog_error(request: Request, exc: CatalogLoadError) -> JSONResponse:
        log.error("Error leyendo catálogo en %s: %s", request.url.path, exc, exc_info=exc)
        return _fallo(MSG_ERROR_SOLUCIONES if exc.catalogo == "soluciones" else MSG_ERROR_PRECIOS)

    @app.get("/api/health")
    def health(mgr: CatalogManager = Depends(get_manager)) -> dict[str, Any]:
        return {"ok": True, "catalogosCargados": mgr.cargado}

    # -------- Query A: catálogo vigente (servicios + grabación) --------
    @app.get("/api/precios")
    def get_precios(mgr: CatalogManager = Depends(get_manager)):
        try:
            precios = mgr.precios()
        except CatalogLoadError:
            log.exception("Error leyendo Excel de precios")
            return _fallo(MSG_ERROR_PRECIOS)
        return [p.to_dict() for p in precios]

    # -------- Query B: catálogo alternativo (soluciones propias) --------
    @app.get("/api/soluciones")
    def get_soluciones(mgr: CatalogManager = Depends(get_manager)):
        try:
            soluciones = mgr.soluciones()
        except CatalogLoadError:
            log.exception("Error leyendo Excel de soluciones")
            return _fallo(MSG_ERROR_SOLUCIONES)
        return [s.to_dict() for s in soluciones]

    @app.get("/api/monedas")
    def get_monedas() -> dict[str, Any]:
        return {
            "base": APP_CURRENCY,
            "secundarias": get_secondary_currencies(),
            "margenSugeridoPct": DEFAULT_MARGIN_PCT,
        }

    @app.post("/api/simulacion")
    def post_simulacion(body: SimulacionRequest, mgr: CatalogManager = Depends(get_manager)):
        sim = simulacion_general(body.num_camaras, body.servicios_ids, body.grabacion, mgr.catalogo())
        grab = sim["grabacion"]
        return {
            "numCamaras": sim["numCamaras"],
            "servicios": [s.id for s in sim["servicios"]],
            "grabacion": {"modalidad": grab.modalidad, "precio_usd": grab.precio_usd} if grab else None,
            "porCamara": sim["porCamara"].to_dict(),
            "total": sim["total"].to_dict(),
        }

    @app.post("/api/cotizacion")
    def post_cotizacion(body: PropuestaRequest, mgr: CatalogManager = Depends(get_manager)):
        items = body.cart()
        tot = aggregate_totals(items, mgr.catalogo(), body.margen_pct)
        flags = duplicate_flags(items)
        tasa = nz(body.tasa, 1.0)
        filas = []
        for it, costo, venta, dup in zip(items, tot.filas, tot.venta_mensual_filas, flags):
            filas.append({**it.to_dict(), "duplicado": dup, "costo": costo.to_dict(), "ventaMensual": venta})
        try:
            validar_para_imprimir(items)
            motivo = None
        except PropuestaInvalida as e:
            motivo = str(e)
        return {
            "margenPct": tot.margen_pct,
            "moneda": body.moneda,
            "filas": filas,
            "costo": tot.costo.to_dict(),
            "venta": tot.venta.to_dict(),
            "convertido": {"costo": _periodos_en(tot.costo, tasa), "venta": _periodos_en(tot.venta, tasa)},
            "idsDuplicados": sorted(tot.ids_duplicados),
            "puedeImprimir": motivo is None,
            "motivo": motivo,
        }

    @app.post("/api/cotizacion/pdf")
    def post_cotizacion_pdf(body: PropuestaRequest, mgr: CatalogManager = Depends(get_manager)):
        items = body.cart()
        buf = io.BytesIO()
        try:
            generar_pdf(items, mgr.catalogo(), body.margen_pct, buf,
                        cliente=body.cliente, moneda=body.moneda, tasa=body.tasa)
        except PropuestaInvalida as e:
            return _fallo(str(e), 422)
        filename = nombre_archivo_propuesta(body.cliente)
        return Response(
            content=buf.getvalue(),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app
