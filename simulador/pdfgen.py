# simulador/pdfgen.py
import os, datetime, re
from typing import BinaryIO, Sequence, Union

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib import colors

from .config import APP_CURRENCY
from .paths import BASE_APP_TITLE, PROPUESTAS_DIR, ensure_output_dir
from .models import Catalogo, CameraCartItem
from .pricing import aggregate_totals, currency_convert
from .carrito import validar_para_imprimir
from .utils import fmt_money_pdf
from .logging_setup import get_logger

log = get_logger(__name__)

# =====================================================
# LAYOUT (puntos A4; origen abajo-izquierda)
# =====================================================
LAYOUT = {
    "MARGIN_X": 36,
    "TITLE_Y": 800,
    "SUBTITLE_Y": 784,
    "META_Ys": (760, 746, 732),          # Fecha / Cliente / Margen+Moneda

    # Tabla
    "HEADER_Y": 700,
    "HEADER_TO_FIRST_ROW_GAP": 16,
    # izquierda: id, descripcion, grabacion, servicios | derecha: cantidad, base, venta
    "COLS_X": {"id": 36, "descripcion": 96, "cantidad": 228, "grabacion": 236,
               "servicios": 326, "base": 488, "venta": 559},
    "ROW_LINE_H": 11,
    "BOTTOM_LIMIT_Y": 150,
    "BODY_FONT_SIZE": 8,

    # Totales
    "TOTALS_TOP_Y": 120,
    "TOTALS_LINE_H": 13,
    "TOTALS_LABEL_X": 470,
    "TOTALS_VALUE_X": 559,
    "TOTALS_COLOR_LABEL": colors.HexColor("#333333"),
    "RULE_COLOR": colors.HexColor("#bbbbbb"),
}

FONT_REG, FONT_BOLD = "Helvetica", "Helvetica-Bold"

Destino = Union[str, BinaryIO]


# ---------- helpers de wrapping ----------
def _wrap_words(c: canvas.Canvas, text: str, max_width: float, font_name: str, font_size: int):
    """Word wrap clásico; una palabra más ancha que la columna se corta."""
    words = str(text or "").split(" ")
    lines, current = [], ""
    for w in words:
        test = (current + " " + w).strip()
        if c.stringWidth(test, font_name, font_size) <= max_width:
            current = test
            continue
        if current:
            lines.append(current)
        while w and c.stringWidth(w, font_name, font_size) > max_width:
            cut = len(w)
            while cut > 1 and c.stringWidth(w[:cut], font_name, font_size) > max_width:
                cut -= 1
            lines.append(w[:cut])
            w = w[cut:]
        current = w
    if current:
        lines.append(current)
    return lines or [""]


def nombre_archivo_propuesta(cliente: str, ahora: datetime.datetime | None = None) -> str:
    ahora = ahora or datetime.datetime.now()
    slug = re.sub(r"[^A-Za-z0-9_-]+", "_", (cliente or "").strip()).strip("_")
    base = f"P-{ahora.strftime('%Y%m%d-%H%M%S')}"
    return f"{base}_{slug}.pdf" if slug else f"{base}.pdf"


# =====================================================
# Generación de PDF (paginado)
# =====================================================

def generar_pdf(
    items: Sequence[CameraCartItem],
    catalogo: Catalogo,
    margen_pct: float,
    destino: Destino | None = None,
    cliente: str = "",
    moneda: str = APP_CURRENCY,
    tasa: float = 1.0,
) -> Destino:
    """
    Resumen imprimible de la propuesta. Si la propuesta no se puede cerrar
    (IDs repetidos o sin filas) lanza PropuestaInvalida sin crear nada.

    destino: ruta o archivo binario abierto. Sin destino se guarda en la
    carpeta de propuestas con un nombre por fecha y cliente.
    """
    validar_para_imprimir(items)

    if destino is None:
        ensure_output_dir()
        destino = os.path.join(PROPUESTAS_DIR, nombre_archivo_propuesta(cliente))

    L = LAYOUT
    tot = aggregate_totals(items, catalogo, margen_pct)
    money = lambda usd: fmt_money_pdf(currency_convert(usd, tasa), moneda)

    c = canvas.Canvas(destino, pagesize=A4)
    c.setTitle(f"Propuesta - {cliente}" if cliente else "Propuesta")
    W = A4[0]
    cols = L["COLS_X"]

    def draw_header():
        c.setFillColor(colors.black)
        c.setFont(FONT_BOLD, 16)
        c.drawString(L["MARGIN_X"], L["TITLE_Y"], BASE_APP_TITLE)
        c.setFont(FONT_REG, 9)
        c.drawString(L["MARGIN_X"], L["SUBTITLE_Y"], "Propuesta de servicios por cámara / grupo")

        y_fecha, y_cli, y_margen = L["META_Ys"]
        c.setFont(FONT_REG, 9)
        c.drawString(L["MARGIN_X"], y_fecha, f"Fecha: {datetime.datetime.now().strftime('%d/%m/%Y')}")
        if cliente:
            c.drawString(L["MARGIN_X"], y_cli, f"Cliente: {cliente}")
        c.drawString(L["MARGIN_X"], y_margen, f"Margen sobre total: {tot.margen_pct:.1f}%   Moneda: {moneda}")

    def draw_table_header():
        y = L["HEADER_Y"]
        c.setFont(FONT_BOLD, L["BODY_FONT_SIZE"])
        c.setFillColor(L["TOTALS_COLOR_LABEL"])
        c.drawString(cols["id"], y, "ID")
        c.drawString(cols["descripcion"], y, "DESCRIPCIÓN")
        c.drawRightString(cols["cantidad"], y, "CANT.")
        c.drawString(cols["grabacion"], y, "GRABACIÓN")
        c.drawString(cols["servicios"], y, "SERVICIOS")
        c.drawRightString(cols["base"], y, "BASE MENSUAL")
        c.drawRightString(cols["venta"], y, "CON MARGEN")
        c.setStrokeColor(L["RULE_COLOR"])
        c.line(L["MARGIN_X"], y - 4, W - L["MARGIN_X"], y - 4)
        return y

    fs = L["BODY_FONT_SIZE"]
    w_id = cols["descripcion"] - cols["id"] - 6
    w_desc = cols["cantidad"] - 24 - cols["descripcion"]
    w_grab = cols["servicios"] - cols["grabacion"] - 6
    w_serv = cols["base"] - 60 - cols["servicios"]

    idx, n_items = 0, len(items)
    while idx < n_items:
        draw_header()
        row_y = draw_table_header() - L["HEADER_TO_FIRST_ROW_GAP"]
        first_on_page = True

        while idx < n_items:
            it, costo = items[idx], tot.filas[idx]
            etiquetas = [s.categoria for s in costo.servicios] + [s.name for s in costo.soluciones]
            cells = {
                "id": _wrap_words(c, it.id, w_id, FONT_REG, fs),
                "descripcion": _wrap_words(c, it.nombre or "-", w_desc, FONT_REG, fs),
                "grabacion": _wrap_words(c, costo.grabacion.modalidad if costo.grabacion else "No definido",
                                         w_grab, FONT_REG, fs),
                "servicios": _wrap_words(c, ", ".join(etiquetas) if etiquetas else "Sin servicios",
                                         w_serv, FONT_REG, fs),
            }
            n_lines = max(len(v) for v in cells.values())
            h_needed = n_lines * L["ROW_LINE_H"] + 3
            # una fila que no entra ni en página vacía se dibuja igual
            if row_y - h_needed < L["BOTTOM_LIMIT_Y"] and not first_on_page:
                break
            first_on_page = False

            c.setFont(FONT_REG, fs)
            c.setFillColor(colors.black)
            for key, lines in cells.items():
                for lidx, line in enumerate(lines):
                    c.drawString(cols[key], row_y - lidx * L["ROW_LINE_H"], line)
            c.drawRightString(cols["cantidad"], row_y, str(it.cantidad))
            c.drawRightString(cols["base"], row_y, money(costo.base.mensual))
            c.drawRightString(cols["venta"], row_y, money(tot.venta_mensual_filas[idx]))

            row_y -= h_needed
            idx += 1

        if idx < n_items:
            c.showPage()

    # Totales (última página)
    totales = [
        ("Costo base diario:", tot.costo.diario, False),
        ("Costo base semanal:", tot.costo.semanal, False),
        ("Total mensual (costo base):", tot.costo.mensual, True),
        ("Venta diaria:", tot.venta.diario, False),
        ("Venta semanal:", tot.venta.semanal, False),
        (f"Total mensual ({tot.margen_pct:.1f}% margen):", tot.venta.mensual, True),
    ]
    y = L["TOTALS_TOP_Y"]
    for label, value, bold in totales:
        c.setFont(FONT_BOLD if bold else FONT_REG, 9)
        c.setFillColor(L["TOTALS_COLOR_LABEL"])
        c.drawRightString(L["TOTALS_LABEL_X"], y, label)
        c.setFillColor(colors.black)
        c.drawRightString(L["TOTALS_VALUE_X"], y, money(value))
        y -= L["TOTALS_LINE_H"]

    c.save()
    log.info("Propuesta generada: %d filas, mensual base %.2f USD", n_items, tot.costo.mensual)
    return destino
