def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "admin-panel"}


def test_content_language_only_for_supported_locales(client):
    r = client.get("/health", headers={"X-Locale": "es"})
    assert r.headers["content-language"] == "es"

    r = client.get("/health", headers={"Accept-Language": "de-DE"})
    assert "content-language" not in r.headers


def test_locale_does_not_leak_between_requests(client, admin_headers, country_factory):
    country_factory("Germany", "Alemania", "DEU")
    spanish = client.get("/admin/tables/countries", headers={**admin_headers, "X-Locale": "es"})
    default = client.get("/admin/tables/countries", headers=admin_headers)
    assert spanish.json()["items"][0]["cells"]["name"] == "Alemania"
    assert default.json()["items"][0]["cells"]["name"] == "Germany"
