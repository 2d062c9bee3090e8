#tools/imprimir_propuesta.py
"""
Genera el PDF de una propuesta guardada como JSON, con el mismo formato
que envía el front:

    {"cliente": "...", "margenPct": 30, "moneda": "USD", "tasa": 1,
     "items": [{"id": "CAM-1", "nombre": "...", "cantidad": 2,
                "selectedServiceIds": [1, 3], "selectedRecording": "local"}]}
"""
from __future__ import annotations

import argparse
import json
import sys

from simulador.carrito import PropuestaInvalida, item_desde_dict
from simulador.catalog_manager import CatalogManager
from simulador.config import APP_CURRENCY
from simulador.dataio import CatalogLoadError
from simulador.pdfgen import generar_pdf
from simulador.logging_setup import get_logger

log = get_logger("tools.imprimir_propuesta")


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Genera el PDF de una propuesta a partir de un JSON.")
    ap.add_argument("propuesta", help="archivo JSON con la propuesta")
    ap.add_argument("-o", "--out", default=None, help="ruta del PDF (por defecto: carpeta de propuestas)")
    ap.add_argument("--precios", default=None, help="catálogo de servicios (xlsx/csv)")
    ap.add_argument("--soluciones", default=None, help="catálogo de soluciones (xlsx/csv)")
    args = ap.parse_args(argv)

    try:
        with open(args.propuesta, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"No se pudo leer la propuesta: {e}", file=sys.stderr)
        return 1

    manager = CatalogManager.desde_config()
    if args.precios:
        manager.ruta_precios = args.precios
    if args.soluciones:
        manager.ruta_soluciones = args.soluciones

    items = [item_desde_dict(d) for d in data.get("items") or []]
    try:
        out = generar_pdf(
            items,
            manager.catalogo(),
            data.get("margenPct"),
            args.out,
            cliente=str(data.get("cliente") or ""),
            moneda=str(data.get("moneda") or APP_CURRENCY),
            tasa=data.get("tasa", 1.0),
        )
    except PropuestaInvalida as e:
        print(str(e), file=sys.stderr)
        return 2
    except CatalogLoadError as e:
        log.exception("Error leyendo catálogos")
        print(f"Error leyendo archivo de {e.catalogo or 'precios'}", file=sys.stderr)
        return 1

    print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
