# simulador/pricing.py
"""
Cálculo de la propuesta: funciones puras sobre el catálogo y las filas.

Todas las cifras de catálogo son mensuales por cámara (USD). El margen es
GLOBAL: se suman los costos base de todas las filas y luego se aplica un
único porcentaje sobre cada total (diario, semanal y mensual).
"""
from __future__ import annotations

from typing import Iterable, Sequence

from .models import (
    LOCAL,
    Catalogo,
    CameraCartItem,
    CostoItem,
    Periodos,
    PriceRow,
    RecordingChoice,
    RecordingInfo,
    TotalesPropuesta,
)
from .utils import nz, to_int

LOCAL_RECORDING_PRICE = 1.5  # Grabación local U$ 1.50 / cámara
LOCAL_RECORDING_LABEL = "Grabación local"
DIAS_MES = 30


def compute_daily(monthly: float) -> float:
    return monthly / DIAS_MES


def compute_weekly(monthly: float) -> float:
    return (monthly * 7) / DIAS_MES


def parse_recording_choice(value) -> RecordingChoice:
    """'local' | id numérico (int o texto) | None."""
    if value is None:
        return None
    if isinstance(value, str):
        s = value.strip()
        if s.lower() == LOCAL:
            return LOCAL
        if not s:
            return None
    return to_int(value, None)


def recording_info(choice: RecordingChoice, recording_options: Iterable[PriceRow]) -> RecordingInfo | None:
    """
    Resuelve la grabación elegida. "local" tiene precio fijo sin importar
    el catálogo; un id que no existe equivale a "sin grabación".
    """
    choice = parse_recording_choice(choice)
    if choice is None:
        return None
    if choice == LOCAL:
        return RecordingInfo(LOCAL_RECORDING_LABEL, LOCAL_RECORDING_PRICE)
    for r in recording_options:
        if r.id == choice:
            return RecordingInfo(r.modalidad, r.precio_usd)
    return None


def _cantidad(item: CameraCartItem) -> int:
    q = to_int(item.cantidad, 0)
    return q if q > 0 else 0


def line_item_base_cost(item: CameraCartItem, catalogo: Catalogo) -> CostoItem:
    """
    Costo base (sin margen) de una fila. Diario y semanal salen del mensual
    POR CÁMARA y recién después se multiplican por la cantidad.
    """
    wanted_services = set(item.servicios_ids)
    servicios = tuple(s for s in catalogo.servicios_analitica if s.id in wanted_services)

    wanted_solutions = set(item.soluciones_ids)
    soluciones = tuple(s for s in catalogo.soluciones if s.id in wanted_solutions)

    grabacion = recording_info(item.grabacion, catalogo.opciones_grabacion)

    mensual_cam = (
        sum(nz(s.precio_usd) for s in servicios)
        + sum(nz(s.total_usd) for s in soluciones)
        + (grabacion.precio_usd if grabacion else 0.0)
    )

    qty = _cantidad(item)
    base = Periodos(
        diario=compute_daily(mensual_cam) * qty,
        semanal=compute_weekly(mensual_cam) * qty,
        mensual=mensual_cam * qty,
    )
    return CostoItem(
        servicios=servicios,
        soluciones=soluciones,
        grabacion=grabacion,
        mensual_por_camara=mensual_cam,
        base=base,
    )


def normalize_margin(margin_percent) -> float:
    m = nz(margin_percent, 0.0)
    return m if m > 0 else 0.0


def margin_factor(margin_percent) -> float:
    return 1 + normalize_margin(margin_percent) / 100


def apply_margin(base_amount: float, margin_percent) -> float:
    """base * (1 + m/100). Margen ausente, inválido o negativo => 0 %."""
    return base_amount * margin_factor(margin_percent)


def _normalize_id(raw) -> str:
    return str(raw if raw is not None else "").strip().lower()


def find_duplicate_ids(items: Sequence[CameraCartItem]) -> set[str]:
    """IDs (normalizados) que aparecen más de una vez. Los vacíos no cuentan."""
    counts: dict[str, int] = {}
    for it in items:
        key = _normalize_id(it.id)
        if not key:
            continue
        counts[key] = counts.get(key, 0) + 1
    return {k for k, n in counts.items() if n > 1}


def duplicate_flags(items: Sequence[CameraCartItem]) -> list[bool]:
    dups = find_duplicate_ids(items)
    return [bool(_normalize_id(it.id)) and _normalize_id(it.id) in dups for it in items]


def aggregate_totals(
    items: Sequence[CameraCartItem],
    catalogo: Catalogo,
    margin_percent=0.0,
) -> TotalesPropuesta:
    filas = tuple(line_item_base_cost(it, catalogo) for it in items)

    costo = Periodos()
    for c in filas:
        costo = costo + c.base

    factor = margin_factor(margin_percent)
    venta = Periodos(
        diario=costo.diario * factor,
        semanal=costo.semanal * factor,
        mensual=costo.mensual * factor,
    )
    return TotalesPropuesta(
        margen_pct=normalize_margin(margin_percent),
        costo=costo,
        venta=venta,
        filas=filas,
        venta_mensual_filas=tuple(c.base.mensual * factor for c in filas),
        ids_duplicados=frozenset(find_duplicate_ids(items)),
    )


def currency_convert(amount_usd: float, rate) -> float:
    """USD -> otra moneda. Sin redondeo; tasa inválida o <= 0 => 1.0."""
    r = nz(rate, 1.0)
    if r <= 0:
        r = 1.0
    return nz(amount_usd, 0.0) * r


def simulacion_general(
    num_camaras,
    servicios_ids: Iterable[int],
    grabacion: RecordingChoice,
    catalogo: Catalogo,
) -> dict:
    """
    Estimación rápida: mismas selecciones para N cámaras (mínimo 1).
    Devuelve costo por cámara y total en las tres granularidades.
    """
    n = to_int(num_camaras, 1)
    n = n if n >= 1 else 1
    item = CameraCartItem(
        id="",
        cantidad=n,
        servicios_ids=tuple(x for x in (to_int(s, None) for s in servicios_ids or ()) if x is not None),
        grabacion=parse_recording_choice(grabacion),
    )
    costo = line_item_base_cost(item, catalogo)
    mensual = costo.mensual_por_camara
    return {
        "numCamaras": n,
        "grabacion": costo.grabacion,
        "servicios": costo.servicios,
        "porCamara": Periodos(compute_daily(mensual), compute_weekly(mensual), mensual),
        "total": costo.base,
    }
