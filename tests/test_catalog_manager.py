import threading

import pytest

from simulador.catalog_manager import CatalogManager
from simulador.dataio import CatalogLoadError
from simulador.models import PriceRow


def _counting_loader(rows):
    calls = {"n": 0}

    def loader(path):
        calls["n"] += 1
        return list(rows)

    return loader, calls


def test_loads_once_and_serves_cached(precios, soluciones):
    lp, cp = _counting_loader(precios)
    ls, cs = _counting_loader(soluciones)
    mgr = CatalogManager("p.xlsx", "s.xlsx", loader_precios=lp, loader_soluciones=ls)

    assert not mgr.cargado
    first = mgr.precios()
    second = mgr.precios()
    assert first == second == tuple(precios)
    assert cp["n"] == 1
    assert cs["n"] == 0          # cada catálogo se carga por separado

    mgr.soluciones()
    mgr.soluciones()
    assert cs["n"] == 1
    assert mgr.cargado


def test_failure_propagates_and_retries(precios):
    state = {"fail": True}

    def flaky(path):
        if state["fail"]:
            raise CatalogLoadError("archivo ilegible")
        return list(precios)

    mgr = CatalogManager("p.xlsx", "s.xlsx", loader_precios=flaky, loader_soluciones=lambda p: [])
    with pytest.raises(CatalogLoadError):
        mgr.precios()
    # nunca se cachea un catálogo vacío en lugar del error
    with pytest.raises(CatalogLoadError):
        mgr.catalogo()

    state["fail"] = False
    assert len(mgr.precios()) == len(precios)


def test_invalidar_forces_reload(precios):
    lp, cp = _counting_loader(precios)
    mgr = CatalogManager("p.xlsx", "s.xlsx", loader_precios=lp, loader_soluciones=lambda p: [])
    mgr.precios()
    mgr.invalidar()
    mgr.precios()
    assert cp["n"] == 2


def test_recargar_notifies_and_keeps_old_cache_on_failure(precios, soluciones):
    state = {"rows": list(precios)}

    def loader(path):
        if state["rows"] is None:
            raise CatalogLoadError("roto")
        return state["rows"]

    mgr = CatalogManager("p.xlsx", "s.xlsx", loader_precios=loader, loader_soluciones=lambda p: list(soluciones))
    seen = []
    mgr.on_update(lambda cat: seen.append(len(cat.precios)))

    mgr.recargar()
    assert seen == [len(precios)]

    state["rows"] = None
    with pytest.raises(CatalogLoadError):
        mgr.recargar()
    assert mgr.precios() == tuple(precios)
    assert seen == [len(precios)]


def test_catalogo_partition(manager):
    cat = manager.catalogo()
    assert [p.id for p in cat.opciones_grabacion] == [10, 11]
    assert [p.id for p in cat.servicios_analitica] == [1, 2, 3]


def test_concurrent_first_access_loads_once():
    calls = {"n": 0}
    gate = threading.Event()

    def slow_loader(path):
        calls["n"] += 1
        gate.wait(1)
        return [PriceRow(id=1, categoria="A", servicio="", modalidad="", precio_usd=1.0)]

    mgr = CatalogManager("p.xlsx", "s.xlsx", loader_precios=slow_loader, loader_soluciones=lambda p: [])
    results = []
    threads = [threading.Thread(target=lambda: results.append(mgr.precios())) for _ in range(8)]
    for t in threads:
        t.start()
    gate.set()
    for t in threads:
        t.join()

    assert calls["n"] == 1
    assert all(r is results[0] for r in results)


class _LockContador:
    def __init__(self):
        self._lock = threading.Lock()
        self.tomas = 0

    def __enter__(self):
        self._lock.acquire()
        self.tomas += 1
        return self

    def __exit__(self, *exc):
        self._lock.release()


def test_catalogo_snapshot_takes_lock_once(manager):
    manager.recargar()
    lock = _LockContador()
    manager._lock = lock
    cat = manager.catalogo()
    assert lock.tomas == 1
    assert len(cat.precios) == 5 and len(cat.soluciones) == 2


def test_load_error_names_the_catalog(precios):
    def boom(path):
        raise CatalogLoadError("roto")

    mgr = CatalogManager("p.xlsx", "s.xlsx", loader_precios=lambda p: list(precios), loader_soluciones=boom)
    with pytest.raises(CatalogLoadError) as err:
        mgr.catalogo()
    assert err.value.catalogo == "soluciones"

    mgr = CatalogManager("p.xlsx", "s.xlsx", loader_precios=boom, loader_soluciones=boom)
    with pytest.raises(CatalogLoadError) as err:
        mgr.recargar()
    assert err.value.catalogo == "precios"
