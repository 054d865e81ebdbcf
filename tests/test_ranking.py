from relayspeed.models import LatencyStats, TIMEOUT_LATENCY
from relayspeed.ranking import (
    all_results_order,
    compute_stats,
    display_order,
    fastest,
    filter_by_country,
)

from conftest import make_result, make_server


def _names(records):
    return [r.hostname for r in records]


class TestFilterByCountry:
    def test_substring_case_insensitive(self):
        servers = [
            make_server('de-1', country='Germany', code='de'),
            make_server('fr-1', country='France', code='fr'),
            make_server('de-2', country='Germany', code='de'),
        ]
        assert _names(filter_by_country(servers, 'ger')) == ['de-1', 'de-2']
        assert _names(filter_by_country(servers, 'GER')) == ['de-1', 'de-2']

    def test_exact_country_code(self):
        servers = [
            make_server('se-1', country='Sweden', code='se'),
            make_server('ch-1', country='Switzerland', code='ch'),
        ]
        assert _names(filter_by_country(servers, 'CH')) == ['ch-1']

    def test_code_must_match_exactly(self):
        servers = [make_server('us-1', country='USA', code='us')]
        assert filter_by_country(servers, 'u s') == []

    def test_no_filter_keeps_everything(self):
        servers = [make_server('a'), make_server('b')]
        assert _names(filter_by_country(servers, None)) == ['a', 'b']
        assert _names(filter_by_country(servers, '')) == ['a', 'b']

    def test_no_match(self):
        assert filter_by_country([make_server('a', country='Germany')], 'japan') == []


class TestDisplayOrder:
    def test_ascending_with_unrecognized_last(self):
        results = [
            make_result('none-1', None),
            make_result('slow', 300.0),
            make_result('fast', 12.0),
            make_result('none-2', None),
        ]
        assert _names(display_order(results)) == ['fast', 'slow', 'none-1', 'none-2']

    def test_unrecognized_keep_relative_order(self):
        results = [make_result('z', None), make_result('m', 5.0), make_result('a', None)]
        assert _names(display_order(results)) == ['m', 'z', 'a']

    def test_timeout_compares_as_number(self):
        results = [make_result('ok', 20.0), make_result('none', None), make_result('timeout', TIMEOUT_LATENCY)]
        assert _names(display_order(results)) == ['timeout', 'ok', 'none']

    def test_does_not_mutate_input(self):
        results = [make_result('b', 2.0), make_result('a', 1.0)]
        display_order(results)
        assert _names(results) == ['b', 'a']


class TestAllResultsOrder:
    def test_timeout_after_numeric(self):
        results = [make_result('timeout', TIMEOUT_LATENCY), make_result('ok', 50.0)]
        assert _names(all_results_order(results)) == ['ok', 'timeout']

    def test_timeout_after_unrecognized(self):
        results = [make_result('timeout', TIMEOUT_LATENCY), make_result('none', None)]
        assert _names(all_results_order(results)) == ['none', 'timeout']

    def test_unrecognized_ranks_as_zero(self):
        results = [make_result('ok', 50.0), make_result('none', None), make_result('faster', 3.0)]
        assert _names(all_results_order(results)) == ['none', 'faster', 'ok']

    def test_timeouts_keep_relative_order(self):
        results = [
            make_result('t1', TIMEOUT_LATENCY),
            make_result('ok', 9.0),
            make_result('t2', TIMEOUT_LATENCY),
        ]
        assert _names(all_results_order(results)) == ['ok', 't1', 't2']


class TestFastest:
    def test_ten_smallest_excluding_unrecognized(self):
        latencies = [float(v) for v in (90, 15, 40, 5, 130, 75, 60, 20, 110, 35, 100, 45, 10, 150, 25)]
        results = [make_result(f'r{int(v)}', v) for v in latencies]
        results += [make_result(f'none{i}', None) for i in range(3)]

        top = fastest(results, 10)

        assert [r.latency_ms for r in top] == sorted(latencies)[:10]
        assert all(r.latency_ms is not None for r in top)

    def test_timeouts_are_plain_numbers(self):
        results = [make_result('ok', 30.0), make_result('timeout', TIMEOUT_LATENCY), make_result('none', None)]
        assert _names(fastest(results, 10)) == ['timeout', 'ok']

    def test_fewer_than_count(self):
        assert _names(fastest([make_result('a', 1.0)], 10)) == ['a']


def test_compute_stats():
    results = [
        make_result('a', 10.0),
        make_result('b', 250.0),
        make_result('c', TIMEOUT_LATENCY),
        make_result('d', None),
    ]
    assert compute_stats(results) == LatencyStats(reachable=2, timeouts=1, total=4)
    assert compute_stats([]) == LatencyStats(reachable=0, timeouts=0, total=0)
