# simulador/app.py
import uvicorn

from .api import create_app
from .catalog_manager import CatalogManager
from .config import HOST, PORT
from .logging_setup import get_logger

log = get_logger(__name__)

def run_app():
    manager = CatalogManager.desde_config()
    log.info("Catálogo de precios: %s", manager.ruta_precios)
    log.info("Catálogo de soluciones: %s", manager.ruta_soluciones)

    app = create_app(manager)
    log.info("Sirviendo en http://%s:%d", HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)

if __name__ == "__main__":
    run_app()
