from __future__ import annotations

from catalog import INFO_URL, SEARCH_URL, CatalogEntry, FilmwebCatalog


def test_lookup_film(fake_session):
    session = fake_session({
        SEARCH_URL: {"searchHits": [{"id": 123, "type": "film", "matchedTitle": "Diuna"}]},
        INFO_URL.format(id=123): {"title": "Diuna: Część druga", "originalTitle": "Dune: Part Two", "year": 2024},
    })

    entry = FilmwebCatalog(session=session).lookup("DIUNA CZĘŚĆ DRUGA")

    assert entry == CatalogEntry(id=123, title="Diuna: Część druga", original_title="Dune: Part Two", year=2024)
    assert entry.ref == "Diuna+Czesc+druga-2024-123"
    assert session.calls[0][1]["params"] == {"query": "DIUNA CZĘŚĆ DRUGA"}
    assert session.headers["x-locale"] == "pl_PL"


def test_best_hit_must_be_a_film(fake_session):
    session = fake_session({SEARCH_URL: {"searchHits": [{"id": 7, "type": "person"}, {"id": 8, "type": "film"}]}})
    assert FilmwebCatalog(session=session).lookup("KOMEDA") is None
    assert len(session.requested) == 1


def test_no_hits(fake_session):
    session = fake_session({SEARCH_URL: {"searchHits": []}})
    assert FilmwebCatalog(session=session).lookup("XYZ") is None


def test_network_failure_is_not_fatal(fake_session):
    assert FilmwebCatalog(session=fake_session()).lookup("DIUNA") is None


def test_ref_without_year():
    assert CatalogEntry(id=5, title="Łódź nocą", original_title=None, year=None).ref == "Lodz+noca-5"
