# simulador/utils.py
import math
import re
from .config import APP_CURRENCY


def _normalizar_separadores(txt: str) -> str:
    """
    Deja el texto con "." decimal. Con ambos separadores, el último es el
    decimal ("1.234,56", "1,234.56"). Una sola coma seguida de 1, 2 o más de
    3 dígitos es decimal ("1,50"); con exactamente 3 es de miles ("1,500").
    """
    if "," not in txt:
        return txt
    if "." in txt:
        if txt.rfind(",") > txt.rfind("."):
            return txt.replace(".", "").replace(",", ".")
        return txt.replace(",", "")
    if txt.count(",") == 1 and len(txt.split(",")[1]) != 3:
        return txt.replace(",", ".")
    return txt.replace(",", "")


def to_float(val, default=0.0) -> float:
    try:
        if val is None:
            return default
        if isinstance(val, bool):
            return default
        if isinstance(val, str):
            txt = _normalizar_separadores(val.strip().replace(" ", ""))
            if not txt:
                return default
            f = float(txt)
        else:
            f = float(val)
        if math.isnan(f) or math.isinf(f):
            return default
        return f
    except Exception:
        return default


def nz(x, default=0.0):
    try:
        f = float(x)
        if math.isnan(f) or math.isinf(f):
            return default
        return f
    except Exception:
        return default


def to_int(val, default=None):
    """Entero a partir de números o texto ("3", "3.0", 3.7 -> 3). Inválido => default."""
    f = to_float(val, None)
    if f is None:
        return default
    return int(f)


def texto_celda(val) -> str:
    """
    Texto de una celda leída con pandas: NaN/None -> "" y los float enteros
    se muestran sin ".0" (15.0 -> "15").
    """
    if val is None:
        return ""
    if isinstance(val, float):
        if math.isnan(val):
            return ""
        if val.is_integer():
            return str(int(val))
    return str(val)


def texto_opcional(val) -> str | None:
    t = texto_celda(val)
    return t if t.strip() else None


def slug_id(name: str) -> str:
    """'Entrada Principal' -> 'entrada_principal'."""
    return re.sub(r"[^a-z0-9]+", "_", (name or "").lower()).strip("_")


def _symbol_pdf(cur: str) -> str:
    """
    Símbolo para el PDF según código de moneda.
    """
    c = (cur or "").upper()

    # Dólar (así lo usan las propuestas)
    if c == "USD":
        return "U$"

    # Perú
    if c == "PEN":
        return "S/."

    # Peso argentino
    if c == "ARS":
        return "AR$"

    # Guaraní paraguayo
    if c in ("PYG", "GS"):
        return "Gs."

    # Bolívar venezolano
    if c in ("VEF", "VES"):
        return "Bs."

    # Real brasileño
    if c == "BRL":
        return "R$"

    # Fallback genérico
    return c


def fmt_money_pdf(n: float, cur: str | None = None) -> str:
    """
    Formato para PDF. Los montos ya deben venir convertidos a 'cur'.
    Ej: "U$ 123.45", "Gs. 10000.00".
    """
    n = nz(n, 0.0)
    sym = _symbol_pdf(cur or APP_CURRENCY)
    return f"{sym} {n:0.2f}"
