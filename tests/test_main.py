import pytest

from relayspeed import main as cli
from relayspeed.models import MeasuredRecord, TIMEOUT_LATENCY
from relayspeed.net import RelayListError


@pytest.fixture
def report_path(tmp_path, monkeypatch):
    path = tmp_path / 'report.html'
    monkeypatch.setattr(cli, 'REPORT_FILE', str(path))
    return path


def _fake_measure(latencies):
    def measure(servers):
        return [MeasuredRecord.from_server(s, latencies.get(s.hostname)) for s in servers]
    return measure


def test_full_run_writes_report_and_prints_fastest(monkeypatch, capsys, report_path, relay_list_text):
    monkeypatch.setattr(cli, 'fetch_relay_list', lambda: relay_list_text)
    monkeypatch.setattr(cli, 'measure_servers', _fake_measure({
        'al-tia-ovpn-001': 48.7,
        'al-tia-wg-001': TIMEOUT_LATENCY,
        'de-ber-wg-001': 21.2,
        'de-fra-wg-001': 19.6,
        'us-nyc-wg-301': None,
    }))

    assert cli.main([]) == 0

    page = report_path.read_text(encoding='utf-8')
    assert 'us-nyc-wg-301' in page
    assert '<div class="stat-number">5</div>' in page

    out = capsys.readouterr().out
    assert 'Found 5 relays' in out
    lines = [ln for ln in out.splitlines() if ln[:2] in ('1.', '2.', '3.', '4.', '5.')]
    assert lines == [
        '1. al-tia-wg-001 (Albania) - Timeout',
        '2. de-fra-wg-001 (Germany) - 20ms',
        '3. de-ber-wg-001 (Germany) - 21ms',
        '4. al-tia-ovpn-001 (Albania) - 49ms',
    ]


def test_country_filter_applies_before_probing(monkeypatch, capsys, report_path, relay_list_text):
    probed = []

    def measure(servers):
        probed.extend(s.hostname for s in servers)
        return [MeasuredRecord.from_server(s, 10.0) for s in servers]

    monkeypatch.setattr(cli, 'fetch_relay_list', lambda: relay_list_text)
    monkeypatch.setattr(cli, 'measure_servers', measure)

    assert cli.main(['--country', 'GER']) == 0

    assert probed == ['de-ber-wg-001', 'de-fra-wg-001']
    assert 'country filter: ger' in report_path.read_text(encoding='utf-8')


def test_country_code_short_flag(monkeypatch, report_path, relay_list_text):
    probed = []

    def measure(servers):
        probed.extend(s.hostname for s in servers)
        return []

    monkeypatch.setattr(cli, 'fetch_relay_list', lambda: relay_list_text)
    monkeypatch.setattr(cli, 'measure_servers', measure)

    assert cli.main(['-c', 'us']) == 0
    assert probed == ['us-nyc-wg-301']


def test_relay_list_failure_exits_nonzero_without_report(monkeypatch, capsys, report_path):
    def fail():
        raise RelayListError('mullvad not found')

    monkeypatch.setattr(cli, 'fetch_relay_list', fail)

    assert cli.main([]) == 1
    assert not report_path.exists()
    assert 'mullvad not found' in capsys.readouterr().out


def test_unexpected_error_exits_nonzero_without_report(monkeypatch, capsys, report_path, relay_list_text):
    def boom(servers):
        raise ValueError('probe loop broke')

    monkeypatch.setattr(cli, 'fetch_relay_list', lambda: relay_list_text)
    monkeypatch.setattr(cli, 'measure_servers', boom)

    assert cli.main([]) == 1
    assert not report_path.exists()
    assert 'Error: probe loop broke' in capsys.readouterr().out
