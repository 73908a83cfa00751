# tests/core/fetch/test_fetcher.py
"""
Testes do download idempotente de Steps.

Os testes asseguram que:
- um cache existente é retornado sem nenhuma chamada de transporte
- localizações são tentadas em ordem e a primeira que funciona vence
- falhas deixam o cache limpo antes da próxima tentativa
- um tipo desconhecido aborta antes de qualquer transporte posterior
- o esgotamento das localizações preserva a lista de tentativas

Decisões arquiteturais:
    - Transportes são dublês (`FakeTransports`); nenhum teste usa rede
"""

import logging

import pytest

from stepcache.core.exceptions import (
    DownloadFailedError,
    RouteNotFoundError,
    StepNotFoundError,
    UnsupportedTransportError,
)
from stepcache.core.fetch import StepFetcher
from stepcache.core.models import DownloadLocation, StepCollection, StepGroup, StepModel, StepSource
from tests._helpers import FakeTransports

STEP_GIT = "https://github.com/example/steps-script.git"
ZIP_URL = "https://steps.example.com/script/1.0.0/step.zip"


def _collection(route, locations):
    step = StepModel(title="Script", source=StepSource(git=STEP_GIT, commit="abc"))
    return StepCollection(
        format_version="0.9.0",
        steplib_source=route.steplib_uri,
        download_locations=locations,
        steps={"script": StepGroup(latest_version_number="1.0.0", versions={"1.0.0": step})},
    )


def _default_locations():
    return [DownloadLocation("zip", "https://steps.example.com/"), DownloadLocation("git", "source/git")]


@pytest.fixture
def registered(route, route_table):
    route_table.add_route(route)
    return route


def test_download_uses_first_working_location(registered, route_table, layout):
    transports = FakeTransports()
    fetcher = StepFetcher(route_table, layout, transports)

    step_dir = fetcher.download_step(_collection(registered, _default_locations()), "script", "1.0.0", "abc")

    assert step_dir == layout.step_cache_dir(registered, "script", "1.0.0")
    assert (step_dir / "marker.txt").read_text(encoding="utf-8") == ZIP_URL
    assert transports.calls == [("zip", ZIP_URL)]


def test_existing_cache_short_circuits_without_transport_calls(registered, route_table, layout):
    transports = FakeTransports()
    fetcher = StepFetcher(route_table, layout, transports)
    collection = _collection(registered, _default_locations())

    first = fetcher.download_step(collection, "script", "1.0.0", "abc")
    transports.calls.clear()
    second = fetcher.download_step(collection, "script", "1.0.0", "abc")

    assert first == second
    assert transports.calls == []


def test_failed_zip_falls_back_to_git_and_discards_partial(registered, route_table, layout, caplog):
    """
    Verifica o fallback ordenado zip → git.

    Invariantes:
        - o lixo deixado pela tentativa zip não sobrevive
        - o git recebe a versão como ref e o commit esperado
        - a falha é registrada em WARNING
    """
    transports = FakeTransports(fail={ZIP_URL})
    fetcher = StepFetcher(route_table, layout, transports)

    with caplog.at_level(logging.WARNING, logger="stepcache"):
        step_dir = fetcher.download_step(
            _collection(registered, _default_locations()), "script", "1.0.0", "abc"
        )

    assert transports.calls == [("zip", ZIP_URL), ("git", STEP_GIT, "1.0.0", "abc")]
    assert (step_dir / "marker.txt").read_text(encoding="utf-8") == STEP_GIT
    assert not (step_dir / "partial").exists()
    assert "step download attempt failed" in caplog.text


def test_unknown_location_type_aborts_before_later_locations(registered, route_table, layout):
    transports = FakeTransports()
    fetcher = StepFetcher(route_table, layout, transports)
    locations = [DownloadLocation("tarball", "https://t/"), DownloadLocation("zip", "https://steps.example.com/")]

    with pytest.raises(UnsupportedTransportError, match="tarball"):
        fetcher.download_step(_collection(registered, locations), "script", "1.0.0", "abc")

    assert transports.calls == []
    assert not layout.step_cache_dir(registered, "script", "1.0.0").exists()


def test_all_locations_failing_raises_with_attempts(registered, route_table, layout):
    transports = FakeTransports(fail={ZIP_URL, STEP_GIT})
    fetcher = StepFetcher(route_table, layout, transports)

    with pytest.raises(DownloadFailedError) as exc_info:
        fetcher.download_step(_collection(registered, _default_locations()), "script", "1.0.0", "abc")

    attempts = exc_info.value.attempts
    assert [loc.type for loc, _ in attempts] == ["zip", "git"]
    assert all("simulated failure" in str(err) for _, err in attempts)
    assert not layout.step_cache_dir(registered, "script", "1.0.0").exists()


def test_unknown_step_raises_before_route_lookup(route_table, layout, route):
    fetcher = StepFetcher(route_table, layout, FakeTransports())
    with pytest.raises(StepNotFoundError):
        fetcher.download_step(_collection(route, _default_locations()), "missing", "1.0.0", "abc")


def test_unregistered_steplib_raises_route_not_found(route_table, layout, route):
    transports = FakeTransports()
    fetcher = StepFetcher(route_table, layout, transports)
    with pytest.raises(RouteNotFoundError):
        fetcher.download_step(_collection(route, _default_locations()), "script", "1.0.0", "abc")
    assert transports.calls == []
