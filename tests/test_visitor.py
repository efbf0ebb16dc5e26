from getclaps.services.visitor import extract_data, get_visitor

SALT = "c4e75796-9fe6-ce66-612e-534b709074ef"


def test_visitor_is_stable_per_ip_and_salt():
    first = get_visitor("203.0.113.7", SALT)

    assert first == get_visitor("203.0.113.7", SALT)
    assert first != get_visitor("203.0.113.8", SALT)
    assert first != get_visitor("203.0.113.7", "9a1c2b9e-0d0f-4c41-b0c4-d6d8b6a4f1aa")


def test_visitor_normalises_ipv6():
    assert get_visitor("2001:db8::1", SALT) == get_visitor("2001:0db8:0000::0001", SALT)


def test_bad_ip_has_no_visitor():
    assert get_visitor(None) is None
    assert get_visitor("not an ip") is None


def test_extract_data_reads_edge_headers():
    data = extract_data({"cf-ipcountry": "AT", "cf-connecting-ip": "203.0.113.7"})

    assert data["country"] == "AT"
    assert data["visitor"] == get_visitor("203.0.113.7")
