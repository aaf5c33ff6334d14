from haulroute.domain.address import country_from_address, split_countries


def test_country_is_last_comma_segment():
    assert country_from_address("Vestergade 1, 8000 Aarhus, Denmark") == "Denmark"


def test_country_without_comma_is_whole_text():
    assert country_from_address("  Denmark ") == "Denmark"


def test_country_missing():
    assert country_from_address(None) is None
    assert country_from_address("") is None
    assert country_from_address("Odense,  ") is None


def test_split_countries_trims_and_drops_blanks():
    assert split_countries("Germany, France,, Denmark ") == {
        "Germany",
        "France",
        "Denmark",
    }
    assert split_countries("") == frozenset()
