# simulador/dataio.py
import os
import pandas as pd

from .models import PriceRow, ComponentCost, SolutionDef
from .utils import to_float, to_int, texto_celda, texto_opcional, slug_id
from .logging_setup import get_logger

log = get_logger(__name__)

# Encabezados del catálogo de terceros (servicios + grabación en la nube)
COLS_PRECIOS = [
    "id", "categoria", "servicio", "modalidad",
    "retencion_imagenes", "resolucion_predeterminada", "fps",
    "precio_usd", "notas",
]

# Encabezados del catálogo de soluciones propias
COL_SOLUCION    = "Solución / Categoría"
COL_ETIQUETA    = "Etiqueta"
COL_CONCEPTO    = "Concepto"
COL_COSTO       = "Costo Real (USD)"
COL_DESCRIPCION = "Descripción Técnica"

ETIQUETA_DEFAULT = "General"
CONCEPTO_DEFAULT = "Componente"


class CatalogLoadError(RuntimeError):
    """No se pudo abrir o interpretar un archivo de catálogo."""

    def __init__(self, message: str, catalogo: str | None = None):
        super().__init__(message)
        # "precios" | "soluciones"; lo completa CatalogManager si falta
        self.catalogo = catalogo


def leer_tabla(path: str) -> pd.DataFrame:
    """
    Lee la primera hoja de un Excel (.xlsx/.xlsm) o un .csv.
    Devuelve un DataFrame sin filas totalmente vacías y con los
    encabezados sin espacios sobrantes.
    """
    if not os.path.exists(path):
        raise CatalogLoadError(f"No se encontró el archivo de precios: {path}")

    ext = os.path.splitext(path)[1].lower()
    try:
        if ext in (".xlsx", ".xlsm"):
            df = pd.read_excel(path, sheet_name=0, engine="openpyxl")
        elif ext == ".csv":
            df = pd.read_csv(path, encoding="utf-8-sig")
        else:
            raise CatalogLoadError(f"Formato de archivo no soportado: {os.path.basename(path)}")
    except CatalogLoadError:
        raise
    except Exception as e:
        raise CatalogLoadError(f"Error leyendo {os.path.basename(path)}: {e}") from e

    if df is None:
        return pd.DataFrame()
    df = df.dropna(how="all")
    df.columns = [str(c).strip() for c in df.columns]
    return df


def _fila_a_precio(row: dict, pos: int) -> PriceRow:
    rid = to_int(row.get("id"), None)
    precio = to_float(row.get("precio_usd"), 0.0)
    if precio < 0:
        log.debug("Precio negativo en fila %d (%s); se usa 0", pos, row.get("servicio"))
        precio = 0.0
    return PriceRow(
        id=rid if rid is not None else pos,
        categoria=texto_celda(row.get("categoria")),
        servicio=texto_celda(row.get("servicio")),
        modalidad=texto_celda(row.get("modalidad")),
        precio_usd=precio,
        retencion_imagenes=texto_opcional(row.get("retencion_imagenes")),
        resolucion_predeterminada=texto_opcional(row.get("resolucion_predeterminada")),
        fps=texto_opcional(row.get("fps")),
        notas=texto_opcional(row.get("notas")),
    )


def precios_desde_df(df: pd.DataFrame) -> list[PriceRow]:
    """Filas del catálogo de terceros -> PriceRow (orden de origen, sin validar)."""
    if df is None or df.empty:
        return []
    records = df.to_dict(orient="records")
    return [_fila_a_precio(row, pos) for pos, row in enumerate(records, start=1)]


def soluciones_desde_df(df: pd.DataFrame) -> list[SolutionDef]:
    """
    Agrupa por "Solución / Categoría" (nombre exacto sin espacios extremos).
    La primera etiqueta vista gana; cada fila aporta un componente.
    """
    if df is None or df.empty:
        return []

    grupos: dict[str, dict] = {}
    for row in df.to_dict(orient="records"):
        name = texto_celda(row.get(COL_SOLUCION)).strip()
        if not name:
            continue

        if name not in grupos:
            etiqueta = texto_celda(row.get(COL_ETIQUETA)).strip() or ETIQUETA_DEFAULT
            grupos[name] = {"id": slug_id(name), "etiqueta": etiqueta, "components": []}

        grupos[name]["components"].append(ComponentCost(
            concept=texto_celda(row.get(COL_CONCEPTO)) or CONCEPTO_DEFAULT,
            cost_usd=to_float(row.get(COL_COSTO), 0.0),
            description=texto_opcional(row.get(COL_DESCRIPCION)),
        ))

    out: list[SolutionDef] = []
    seen_ids: dict[str, str] = {}
    for name, g in grupos.items():
        if g["id"] in seen_ids:
            log.warning("Soluciones '%s' y '%s' comparten id '%s'", seen_ids[g["id"]], name, g["id"])
        seen_ids.setdefault(g["id"], name)
        out.append(SolutionDef(
            id=g["id"],
            name=name,
            etiqueta=g["etiqueta"],
            components=tuple(g["components"]),
        ))
    return out


def cargar_precios(path: str) -> list[PriceRow]:
    precios = precios_desde_df(leer_tabla(path))
    log.info("Precios cargados desde %s: %d", os.path.basename(path), len(precios))
    return precios


def cargar_soluciones(path: str) -> list[SolutionDef]:
    soluciones = soluciones_desde_df(leer_tabla(path))
    log.info("Soluciones cargadas desde %s: %d", os.path.basename(path), len(soluciones))
    return soluciones
