import os

import pytest

from relayspeed.models import MeasuredRecord, ServerRecord

HERE = os.path.dirname(os.path.abspath(__file__))


@pytest.fixture
def relay_list_path():
    return os.path.join(HERE, 'relay_list.txt')


@pytest.fixture
def relay_list_text(relay_list_path):
    with open(relay_list_path, 'r', encoding='utf-8') as f:
        return f.read()


def make_server(hostname, country='Germany', city='Berlin', ip='10.0.0.1', code='de'):
    return ServerRecord(
        hostname=hostname,
        ipv4_address=ip,
        country_name=country,
        city_name=city,
        protocol_info='WireGuard, hosted by test (rented)',
        country_code=code,
    )


def make_result(hostname, latency, country='Germany', city='Berlin'):
    return MeasuredRecord.from_server(make_server(hostname, country=country, city=city), latency)
