# simulador/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .config import RECORDING_CATEGORY_DEFAULT

# Selección de grabación: "local" (precio fijo), id de un plan en la nube, o nada
RecordingChoice = Union[str, int, None]
LOCAL = "local"


# ===== Catálogo "terceros": servicios de analítica + planes de grabación =====

@dataclass(frozen=True)
class PriceRow:
    id: int
    categoria: str
    servicio: str
    modalidad: str
    precio_usd: float
    retencion_imagenes: str | None = None
    resolucion_predeterminada: str | None = None
    fps: str | None = None
    notas: str | None = None

    def to_dict(self) -> dict[str, Any]:
        # Los opcionales vacíos no se serializan (ausentes, no "")
        out: dict[str, Any] = {
            "id": self.id,
            "categoria": self.categoria,
            "servicio": self.servicio,
            "modalidad": self.modalidad,
        }
        for k in ("retencion_imagenes", "resolucion_predeterminada", "fps"):
            v = getattr(self, k)
            if v is not None:
                out[k] = v
        out["precio_usd"] = self.precio_usd
        if self.notas is not None:
            out["notas"] = self.notas
        return out


# ===== Catálogo "in-house": soluciones agrupadas por nombre =====

@dataclass(frozen=True)
class ComponentCost:
    concept: str
    cost_usd: float
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"concept": self.concept, "costUsd": self.cost_usd}
        if self.description is not None:
            out["description"] = self.description
        return out


@dataclass(frozen=True)
class SolutionDef:
    id: str
    name: str
    etiqueta: str
    components: tuple[ComponentCost, ...] = ()

    @property
    def total_usd(self) -> float:
        """Costo base total; siempre se recalcula desde los componentes."""
        return sum(c.cost_usd for c in self.components)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "etiqueta": self.etiqueta,
            "components": [c.to_dict() for c in self.components],
        }


@dataclass(frozen=True)
class Catalogo:
    """
    Foto inmutable de ambos catálogos. La partición analítica / grabación
    se deriva de la categoría, no se guarda en las filas.
    """
    precios: tuple[PriceRow, ...] = ()
    soluciones: tuple[SolutionDef, ...] = ()
    categoria_grabacion: str = RECORDING_CATEGORY_DEFAULT

    @property
    def servicios_analitica(self) -> list[PriceRow]:
        return [p for p in self.precios if p.categoria != self.categoria_grabacion]

    @property
    def opciones_grabacion(self) -> list[PriceRow]:
        return [p for p in self.precios if p.categoria == self.categoria_grabacion]


# ===== Propuesta (carrito) =====

@dataclass(frozen=True)
class CameraCartItem:
    id: str = ""
    nombre: str = ""
    cantidad: int = 1
    servicios_ids: tuple[int, ...] = ()
    soluciones_ids: tuple[str, ...] = ()
    grabacion: RecordingChoice = LOCAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "nombre": self.nombre,
            "cantidad": self.cantidad,
            "selectedServiceIds": list(self.servicios_ids),
            "selectedSolutionIds": list(self.soluciones_ids),
            "selectedRecording": self.grabacion,
        }


# ===== Resultados de cálculo =====

@dataclass(frozen=True)
class RecordingInfo:
    modalidad: str
    precio_usd: float


@dataclass(frozen=True)
class Periodos:
    diario: float = 0.0
    semanal: float = 0.0
    mensual: float = 0.0

    def __add__(self, other: "Periodos") -> "Periodos":
        return Periodos(
            self.diario + other.diario,
            self.semanal + other.semanal,
            self.mensual + other.mensual,
        )

    def to_dict(self) -> dict[str, float]:
        return {"diario": self.diario, "semanal": self.semanal, "mensual": self.mensual}


@dataclass(frozen=True)
class CostoItem:
    servicios: tuple[PriceRow, ...]
    soluciones: tuple[SolutionDef, ...]
    grabacion: RecordingInfo | None
    mensual_por_camara: float
    base: Periodos

    def to_dict(self) -> dict[str, Any]:
        return {
            "servicios": [s.id for s in self.servicios],
            "soluciones": [s.id for s in self.soluciones],
            "grabacion": (
                {"modalidad": self.grabacion.modalidad, "precio_usd": self.grabacion.precio_usd}
                if self.grabacion else None
            ),
            "mensualPorCamara": self.mensual_por_camara,
            "base": self.base.to_dict(),
        }


@dataclass(frozen=True)
class TotalesPropuesta:
    margen_pct: float
    costo: Periodos
    venta: Periodos
    filas: tuple[CostoItem, ...] = ()
    # Venta mensual por fila usando el mismo margen global
    venta_mensual_filas: tuple[float, ...] = ()
    ids_duplicados: frozenset[str] = field(default_factory=frozenset)

    @property
    def hay_ids_duplicados(self) -> bool:
        return bool(self.ids_duplicados)
