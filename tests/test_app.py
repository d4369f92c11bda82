import pytest

from app import app


@pytest.fixture
def client():
    app.config.update(TESTING=True)
    with app.test_client() as client:
        yield client


def _post(client, **fields):
    form = {"method": "bisection", "function_expr": "x**3 - x - 2"}
    form.update(fields)
    return client.post("/", data=form).get_data(as_text=True)


def test_index_renders(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Zero of Functions" in response.get_data(as_text=True)


def test_single_bracket_run(client):
    page = _post(client, lower="1", upper="2")

    assert "1.52138" in page


def test_newton_from_seed(client):
    page = _post(
        client,
        method="newton_raphson",
        function_expr="x**2 - 2",
        newton_start="seed",
        initial_guess="1",
    )

    assert "1.41421" in page


def test_scan_mode_lists_roots(client):
    page = _post(client, function_expr="x**3 - x", mode="scan", scan_low="-2", scan_high="2", step="0.5")

    assert "Roots" in page
    assert "at most 1 positive" in page


def test_scan_without_roots(client):
    page = _post(client, function_expr="x**2 + 1", mode="scan")

    assert "No roots found in the scanned range." in page


def test_invalid_expression_is_reported(client):
    page = _post(client, function_expr="x +* 2")

    assert "Invalid function expression" in page


def test_missing_sign_change_is_reported(client):
    page = _post(client, function_expr="x**2 + 1", lower="-1", upper="1")

    assert "opposite signs" in page


def test_empty_function(client):
    page = _post(client, function_expr="   ")

    assert "Please provide f(x)." in page


def test_bad_tolerance(client):
    page = _post(client, tolerance="0")

    assert "Tolerance must be greater than 0." in page
