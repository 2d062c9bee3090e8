# simulador/paths.py
import os, sys
from .config import APP_CONFIG, PRECIOS_FILE, SOLUCIONES_FILE

BASE_APP_TITLE = "Simulador de servicios: Cámaras + IA"

def resource_path(relative_path: str) -> str:
    if getattr(sys, "frozen", False):
        base_dir = os.path.dirname(sys.executable)
        return os.path.join(base_dir, relative_path)
    return os.path.join(os.path.abspath("."), relative_path)

def user_docs_dir(subfolder: str) -> str:
    base = os.path.join(os.path.expanduser("~"), "Documents", "SimuladorCamaras")
    return os.path.join(base, subfolder)

def _data_dir() -> str:
    raw = str(APP_CONFIG.get("data_dir") or "").strip()
    if raw:
        return os.path.abspath(os.path.expanduser(os.path.expandvars(raw)))
    return os.path.abspath(resource_path("data"))

# Rutas principales
DATA_DIR        = _data_dir()                        # solo lectura: catálogos
PROPUESTAS_DIR  = user_docs_dir("propuestas")        # escribible: PDFs generados

def catalog_path(filename: str) -> str:
    return os.path.join(DATA_DIR, filename)

PRECIOS_PATH    = catalog_path(PRECIOS_FILE)
SOLUCIONES_PATH = catalog_path(SOLUCIONES_FILE)

def ensure_output_dir() -> str:
    os.makedirs(PROPUESTAS_DIR, exist_ok=True)
    return PROPUESTAS_DIR
