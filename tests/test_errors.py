from bzeagg.errors import InvalidDependenciesError


def test_message_names_component():
    err = InvalidDependenciesError("NewMarketRepository")
    assert str(err) == "invalid dependencies for: NewMarketRepository"


def test_name_is_kept():
    err = InvalidDependenciesError("NewHealthService")
    assert err.name == "NewHealthService"


def test_is_a_value_error_with_message():
    err = InvalidDependenciesError("NewPricesService")
    assert isinstance(err, ValueError)
    assert str(err) == "invalid dependencies for: NewPricesService"