import pytest

import simulador.pricing as pr
from simulador.models import CameraCartItem, Catalogo, PriceRow


def test_daily_weekly_relations():
    for monthly in (0.0, 1.0, 30.0, 45.0, 123.45, 1e6):
        daily = pr.compute_daily(monthly)
        weekly = pr.compute_weekly(monthly)
        assert daily == pytest.approx(monthly / 30)
        assert weekly == pytest.approx(monthly * 7 / 30)
        assert weekly == pytest.approx(daily * 7)


def test_recording_local_is_fixed_price(catalogo):
    info = pr.recording_info("local", catalogo.opciones_grabacion)
    assert info.precio_usd == 1.5
    assert info.modalidad == "Grabación local"
    # incluso con catálogo vacío
    assert pr.recording_info("local", []).precio_usd == 1.5
    assert pr.recording_info(" LOCAL ", []).precio_usd == 1.5


def test_recording_catalog_and_dangling(catalogo):
    info = pr.recording_info(10, catalogo.opciones_grabacion)
    assert (info.modalidad, info.precio_usd) == ("7 días", 15.0)
    assert pr.recording_info("11", catalogo.opciones_grabacion).precio_usd == 25.0
    assert pr.recording_info(999, catalogo.opciones_grabacion) is None
    assert pr.recording_info(None, catalogo.opciones_grabacion) is None
    assert pr.recording_info("basura", catalogo.opciones_grabacion) is None


def test_scenario_single_camera_service_plus_recording():
    cat = Catalogo(precios=(
        PriceRow(id=1, categoria="PLACAS", servicio="LPR", modalidad="Nube", precio_usd=30.0),
        PriceRow(id=2, categoria="GRABACIÓN DE VIDEO EN LA NUBE", servicio="Nube", modalidad="7 días", precio_usd=15.0),
    ))
    item = CameraCartItem(id="CAM-1", cantidad=1, servicios_ids=(1,), grabacion=2)
    c = pr.line_item_base_cost(item, cat)
    assert c.base.mensual == pytest.approx(45.0)
    assert c.base.diario == pytest.approx(1.5)
    assert c.base.semanal == pytest.approx(10.5)


def test_line_item_quantity_multiplies_each_granularity(catalogo):
    item = CameraCartItem(id="A", cantidad=4, servicios_ids=(1, 2), grabacion="local")
    c = pr.line_item_base_cost(item, catalogo)
    unit = 30.0 + 12.5 + 1.5
    assert c.mensual_por_camara == pytest.approx(unit)
    assert c.base.mensual == pytest.approx(unit * 4)
    assert c.base.diario == pytest.approx(unit / 30 * 4)
    assert c.base.semanal == pytest.approx(unit * 7 / 30 * 4)


def test_zero_quantity_costs_nothing(catalogo):
    item = CameraCartItem(id="A", cantidad=0, servicios_ids=(1, 2, 3), soluciones_ids=("perimetro",), grabacion=11)
    tot = pr.aggregate_totals([item], catalogo, 50)
    assert tot.costo.mensual == 0
    assert tot.costo.diario == 0
    assert tot.venta.semanal == 0


def test_dangling_and_misplaced_ids_are_ignored(catalogo):
    # 999 no existe; 10 es un plan de grabación, no un servicio de analítica
    item = CameraCartItem(id="A", cantidad=1, servicios_ids=(1, 999, 10),
                          soluciones_ids=("no_existe",), grabacion=None)
    c = pr.line_item_base_cost(item, catalogo)
    assert [s.id for s in c.servicios] == [1]
    assert c.soluciones == ()
    assert c.grabacion is None
    assert c.base.mensual == pytest.approx(30.0)


def test_solutions_add_their_component_total(catalogo):
    item = CameraCartItem(id="A", cantidad=2, soluciones_ids=("entrada_principal",), grabacion=None)
    c = pr.line_item_base_cost(item, catalogo)
    assert c.mensual_por_camara == pytest.approx(15.0)
    assert c.base.mensual == pytest.approx(30.0)


def test_apply_margin():
    assert pr.apply_margin(100.0, 0) == 100.0
    assert pr.apply_margin(100.0, 30) == pytest.approx(130.0)
    assert pr.apply_margin(100.0, None) == 100.0
    assert pr.apply_margin(100.0, -20) == 100.0
    assert pr.apply_margin(100.0, "abc") == 100.0
    for m in (0, 0.5, 10, 250):
        assert pr.apply_margin(42.0, m) >= 42.0


def test_aggregate_global_margin_scenario():
    cat = Catalogo(precios=(
        PriceRow(id=1, categoria="A", servicio="", modalidad="", precio_usd=10.0),
        PriceRow(id=2, categoria="B", servicio="", modalidad="", precio_usd=20.0),
    ))
    items = [
        CameraCartItem(id="CAM-1", cantidad=2, servicios_ids=(1,), grabacion=None),
        CameraCartItem(id="CAM-2", cantidad=3, servicios_ids=(2,), grabacion=None),
    ]
    tot = pr.aggregate_totals(items, cat, 30)
    assert tot.costo.mensual == pytest.approx(80.0)
    assert tot.venta.mensual == pytest.approx(104.0)
    assert tot.venta.diario == pytest.approx(80.0 / 30 * 1.3)
    assert tot.venta_mensual_filas == pytest.approx((26.0, 78.0))
    assert tot.margen_pct == 30
    assert not tot.hay_ids_duplicados


def test_aggregate_is_deterministic(catalogo):
    items = [CameraCartItem(id="X", cantidad=3, servicios_ids=(1, 3), grabacion=10)]
    assert pr.aggregate_totals(items, catalogo, 25) == pr.aggregate_totals(items, catalogo, 25)


def test_currency_convert():
    assert pr.currency_convert(10.0, 7300) == 73000.0
    assert pr.currency_convert(1.234567, 3) == pytest.approx(3.703701)
    assert pr.currency_convert(10.0, 0) == 10.0
    assert pr.currency_convert(10.0, -5) == 10.0
    assert pr.currency_convert(10.0, "x") == 10.0


def test_duplicate_detection_case_and_whitespace():
    items = [
        CameraCartItem(id="CAM-1"),
        CameraCartItem(id="cam-1 "),
        CameraCartItem(id="Cam-1"),
        CameraCartItem(id="CAM-2"),
        CameraCartItem(id=""),
        CameraCartItem(id="   "),
        CameraCartItem(id="   "),
    ]
    assert pr.find_duplicate_ids(items) == {"cam-1"}
    assert pr.duplicate_flags(items) == [True, True, True, False, False, False, False]
    # idempotente
    assert pr.find_duplicate_ids(items) == pr.find_duplicate_ids(items)


def test_simulacion_general(catalogo):
    sim = pr.simulacion_general(10, [1, 3], "local", catalogo)
    unit = 30.0 + 8.0 + 1.5
    assert sim["numCamaras"] == 10
    assert sim["porCamara"].mensual == pytest.approx(unit)
    assert sim["porCamara"].semanal == pytest.approx(unit * 7 / 30)
    assert sim["total"].mensual == pytest.approx(unit * 10)


def test_simulacion_general_floors_cameras_at_one(catalogo):
    assert pr.simulacion_general(0, [1], None, catalogo)["numCamaras"] == 1
    assert pr.simulacion_general("abc", [1], None, catalogo)["numCamaras"] == 1
