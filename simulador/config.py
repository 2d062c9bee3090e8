# simulador/config.py
from __future__ import annotations
import os, json
from typing import Dict, Any, Tuple, List

# --------------------------
# Utilidades de rutas
# --------------------------
def _documents_dir() -> str:
    return os.path.join(os.path.expanduser("~"), "Documents")


# --------------------------
# Detección de carpeta y archivo de configuración
# --------------------------
_THIS_DIR = os.path.dirname(os.path.abspath(__file__))


def _candidate_config_dirs() -> List[str]:
    dirs: List[str] = []
    # 1) Variable de entorno explícita
    env_dir = os.environ.get("SIMULADOR_CONFIG_DIR", "").strip()
    if env_dir:
        dirs.append(env_dir)

    # 2) Carpeta "config" relativa al cwd
    dirs.append(os.path.join(os.getcwd(), "config"))

    # 3) Carpeta "config" relativa a este módulo
    dirs.append(os.path.join(_THIS_DIR, "config"))

    # Eliminar duplicados conservando orden
    out: List[str] = []
    seen: set[str] = set()
    for d in dirs:
        if d not in seen:
            seen.add(d)
            out.append(d)
    return out


def _pick_config_path() -> Tuple[str, str]:
    for d in _candidate_config_dirs():
        for fname in ("config.json", "app_config.json"):
            p = os.path.join(d, fname)
            if os.path.exists(p):
                return d, p
    # Sin archivo: se trabaja con los defaults
    base = _candidate_config_dirs()[0]
    return base, os.path.join(base, "config.json")


CONFIG_DIR, CONFIG_PATH = _pick_config_path()

# --------------------------
# Defaults + constantes exportadas
# --------------------------
DEFAULT_CONFIG: Dict[str, Any] = {
    "data_dir": "",                 # vacío => <cwd>/data
    "precios_file": "precios_software_seguridad_nube.xlsx",
    "soluciones_file": "precios.xlsx",
    "recording_category": "GRABACIÓN DE VIDEO EN LA NUBE",
    "default_margin_pct": 30.0,
    "currency": "USD",
    "secondary_currencies": ["PYG", "ARS", "BRL"],

    # servidor HTTP
    "host": "127.0.0.1",
    "port": 8000,

    # logging opcional:
    # "log_dir": "/var/log/simulador"
    # "log_level": "INFO"  # ERROR, WARNING, INFO, DEBUG
}

# Categoría que marca los planes de grabación en la nube dentro del catálogo
RECORDING_CATEGORY_DEFAULT = DEFAULT_CONFIG["recording_category"]


def _load_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except Exception:
        return {}


def load_app_config(path: str | None = None) -> Dict[str, Any]:
    cfg = DEFAULT_CONFIG.copy()
    raw = _load_json(path or CONFIG_PATH)
    if raw:
        for key in ("data_dir", "precios_file", "soluciones_file", "recording_category", "host"):
            if key in raw and str(raw[key]).strip():
                cfg[key] = str(raw[key]).strip()

        try:
            m = float(raw.get("default_margin_pct", cfg["default_margin_pct"]))
            if m >= 0:
                cfg["default_margin_pct"] = m
        except Exception:
            pass

        cur = str(raw.get("currency", cfg["currency"])).strip().upper()
        if cur:
            cfg["currency"] = cur

        sec = raw.get("secondary_currencies")
        if isinstance(sec, list):
            cfg["secondary_currencies"] = [str(c).strip().upper() for c in sec if str(c).strip()]

        try:
            port = int(raw.get("port", cfg["port"]))
            if 0 < port < 65536:
                cfg["port"] = port
        except Exception:
            pass

        # logging (opcionales)
        if "log_dir" in raw and str(raw["log_dir"]).strip():
            cfg["log_dir"] = str(raw["log_dir"]).strip()
        if "log_level" in raw and str(raw["log_level"]).strip():
            cfg["log_level"] = str(raw["log_level"]).strip().upper()

    # El entorno manda sobre el archivo
    for env_key, cfg_key in (("DATA_DIR", "data_dir"), ("LOG_DIR", "log_dir"), ("LOG_LEVEL", "log_level")):
        val = os.environ.get(env_key, "").strip()
        if val:
            cfg[cfg_key] = val.upper() if cfg_key == "log_level" else val
    return cfg


APP_CONFIG = load_app_config()

# --------------------------
# Parámetros principales
# --------------------------
RECORDING_CATEGORY: str     = APP_CONFIG["recording_category"]
DEFAULT_MARGIN_PCT: float   = float(APP_CONFIG["default_margin_pct"])
APP_CURRENCY: str           = APP_CONFIG["currency"]
SECONDARY_CURRENCIES: List[str] = list(APP_CONFIG["secondary_currencies"])
PRECIOS_FILE: str           = APP_CONFIG["precios_file"]
SOLUCIONES_FILE: str        = APP_CONFIG["soluciones_file"]
HOST: str                   = APP_CONFIG["host"]
PORT: int                   = int(APP_CONFIG["port"])


def get_secondary_currencies() -> List[str]:
    """
    Monedas alternativas en las que se puede mostrar una propuesta.
    La tasa la ingresa el usuario; aquí sólo se listan los códigos.
    """
    return SECONDARY_CURRENCIES[:]


# --------------------------
# Logging (rutas y nivel)
# --------------------------
def _default_log_dir() -> str:
    return os.path.join(_documents_dir(), "SimuladorCamaras", "logs")


_raw_log_dir = APP_CONFIG.get("log_dir", "").strip() if isinstance(APP_CONFIG.get("log_dir"), str) else ""
if _raw_log_dir:
    LOG_DIR: str = os.path.abspath(os.path.expanduser(os.path.expandvars(_raw_log_dir)))
else:
    LOG_DIR: str = _default_log_dir()

LOG_LEVEL: str = str(APP_CONFIG.get("log_level", "INFO")).strip().upper()
if LOG_LEVEL not in ("ERROR", "WARNING", "INFO", "DEBUG"):
    LOG_LEVEL = "INFO"


__all__ = [
    "CONFIG_DIR", "CONFIG_PATH", "DEFAULT_CONFIG",
    "APP_CONFIG", "load_app_config",
    "RECORDING_CATEGORY", "RECORDING_CATEGORY_DEFAULT", "DEFAULT_MARGIN_PCT",
    "APP_CURRENCY", "SECONDARY_CURRENCIES", "get_secondary_currencies",
    "PRECIOS_FILE", "SOLUCIONES_FILE", "HOST", "PORT",
    "LOG_DIR", "LOG_LEVEL",
]
