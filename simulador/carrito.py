# simulador/carrito.py
"""
Estado de la propuesta (filas cámara/grupo) manejado con funciones puras:
cada operación devuelve una lista nueva y no toca la recibida.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Sequence

from .models import LOCAL, CameraCartItem
from .pricing import find_duplicate_ids, parse_recording_choice
from .utils import to_float, to_int

CAMPOS_EDITABLES = ("id", "nombre", "cantidad", "grabacion")

MSG_IDS_DUPLICADOS = "Hay IDs de cámara repetidos. Corrige los duplicados antes de generar el PDF."
MSG_SIN_FILAS = "No hay filas en la propuesta para imprimir."


class PropuestaInvalida(ValueError):
    """La propuesta no se puede cerrar/imprimir en su estado actual."""


def nuevo_item(n: int) -> CameraCartItem:
    return CameraCartItem(id=f"CAM-{n}", nombre="", cantidad=1, grabacion=LOCAL)


def agregar_item(items: Sequence[CameraCartItem]) -> list[CameraCartItem]:
    return [*items, nuevo_item(len(items) + 1)]


def quitar_item(items: Sequence[CameraCartItem], index: int) -> list[CameraCartItem]:
    return [it for i, it in enumerate(items) if i != index]


def _normalizar_cantidad(valor: Any, actual: int) -> int:
    # Vacío mientras se escribe => 0; texto no numérico => se deja lo que había
    if valor is None or (isinstance(valor, str) and not valor.strip()):
        return 0
    f = to_float(valor, None)
    if f is None:
        return actual
    return int(f) if f > 0 else 0


def actualizar_campo(
    items: Sequence[CameraCartItem],
    index: int,
    campo: str,
    valor: Any,
) -> list[CameraCartItem]:
    if campo not in CAMPOS_EDITABLES:
        raise ValueError(f"Campo no editable: {campo!r}")

    out: list[CameraCartItem] = []
    for i, it in enumerate(items):
        if i != index:
            out.append(it)
            continue
        if campo == "cantidad":
            it = replace(it, cantidad=_normalizar_cantidad(valor, it.cantidad))
        elif campo == "grabacion":
            it = replace(it, grabacion=parse_recording_choice(valor))
        else:
            it = replace(it, **{campo: "" if valor is None else str(valor)})
        out.append(it)
    return out


def alternar_seleccion(
    items: Sequence[CameraCartItem],
    index: int,
    sel_id: Any,
    campo: str = "servicios",
) -> list[CameraCartItem]:
    """
    Marca/desmarca un servicio (id numérico) o una solución (id texto)
    en la fila indicada, conservando el orden de selección.
    """
    if campo == "servicios":
        attr = "servicios_ids"
        sel_id = to_int(sel_id, None)
        if sel_id is None:
            return list(items)
    elif campo == "soluciones":
        attr = "soluciones_ids"
        sel_id = str(sel_id)
    else:
        raise ValueError(f"Selección desconocida: {campo!r}")

    out: list[CameraCartItem] = []
    for i, it in enumerate(items):
        if i == index:
            actual = getattr(it, attr)
            if sel_id in actual:
                nuevo = tuple(x for x in actual if x != sel_id)
            else:
                nuevo = (*actual, sel_id)
            it = replace(it, **{attr: nuevo})
        out.append(it)
    return out


def item_desde_dict(d: Mapping[str, Any]) -> CameraCartItem:
    """Acepta tanto las llaves internas como las camelCase del front."""
    servicios = d.get("selectedServiceIds", d.get("servicios_ids")) or []
    soluciones = d.get("selectedSolutionIds", d.get("soluciones_ids")) or []
    grab = d.get("selectedRecording", d.get("grabacion", LOCAL))
    cant = to_int(d.get("cantidad"), 0)
    return CameraCartItem(
        id="" if d.get("id") is None else str(d["id"]),
        nombre="" if d.get("nombre") is None else str(d["nombre"]),
        cantidad=cant if cant > 0 else 0,
        servicios_ids=tuple(x for x in (to_int(s, None) for s in servicios) if x is not None),
        soluciones_ids=tuple(str(s) for s in soluciones),
        grabacion=parse_recording_choice(grab),
    )


def validar_para_imprimir(items: Sequence[CameraCartItem]) -> None:
    """
    Los duplicados se toleran mientras se edita, pero no al cerrar la
    propuesta. Lanza PropuestaInvalida con el motivo.
    """
    if find_duplicate_ids(items):
        raise PropuestaInvalida(MSG_IDS_DUPLICADOS)
    if not items:
        raise PropuestaInvalida(MSG_SIN_FILAS)
