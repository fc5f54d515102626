from datetime import datetime, time
import pytest
from procurement.config.pagination import normalize_pagination, MAX_LIMIT
from procurement.errors import InvalidArgument
from procurement.services.order_query import PurchaseFilters
from procurement.utils.filters import apply_filters
from procurement.utils.listing import build_page_payload
from procurement.utils.validation import parse_date, parse_date_range, sanitize_search, validate_id


def test_validate_id():
    assert validate_id(5) == 5
    assert validate_id(' 12 ') == 12
    for bad in (0, -3, 'abc', '1e3', None, True, 2.0, '507f1f77bcf86cd799439011', '²', '١٢', '12²'):
        with pytest.raises(InvalidArgument):
            validate_id(bad)


def test_parse_date_formats():
    assert parse_date('2024-03-05') == datetime(2024, 3, 5)
    assert parse_date('2024-03-05T10:11:12') == datetime(2024, 3, 5, 10, 11, 12)
    aware = parse_date('2024-03-05T10:11:12+00:00')
    assert aware.tzinfo is None
    assert parse_date(None) is None and parse_date('') is None
    with pytest.raises(InvalidArgument):
        parse_date('not-a-date')
    with pytest.raises(InvalidArgument):
        parse_date('2024-13-45')


def test_date_to_covers_whole_day():
    start, end = parse_date_range('2024-03-01', '2024-03-01')
    assert start == datetime(2024, 3, 1)
    assert end == datetime.combine(datetime(2024, 3, 1).date(), time.max)
    # explicit times are kept as given
    _, end = parse_date_range(None, '2024-03-01T08:00:00')
    assert end == datetime(2024, 3, 1, 8)


def test_inverted_range_rejected():
    with pytest.raises(InvalidArgument):
        parse_date_range('2024-03-02', '2024-03-01')


def test_sanitize_search_escapes_and_caps():
    assert sanitize_search('  PO-(1)  ') == 'PO-(1)'
    assert sanitize_search('100%_off\\') == '100\\%\\_off\\\\'
    assert sanitize_search('   ') is None
    assert sanitize_search(None) is None
    assert len(sanitize_search('x' * 500)) == 100


def test_normalize_pagination_defaults_and_caps():
    assert normalize_pagination(None, None) == (1, 10)
    assert normalize_pagination('abc', 'xyz') == (1, 10)
    assert normalize_pagination('0', '-5') == (1, 10)
    assert normalize_pagination('3', '25') == (3, 25)
    assert normalize_pagination('2', '1000') == (2, MAX_LIMIT)


def test_page_payload_pages_is_ceil():
    payload = build_page_payload([], 21, 4, 10)
    assert payload == {'data': [], 'pagination': {'page': 4, 'limit': 10, 'total': 21, 'pages': 3}}
    assert build_page_payload([], 0, 1, 10)['pagination']['pages'] == 0
    assert build_page_payload([], 20, 1, 10)['pagination']['pages'] == 2


def test_apply_filters_skips_empty_and_validates():
    calls = []
    specs = {
        'n': {'coerce': int, 'op': lambda q, v: q + [('n', v)]},
        's': {'op': lambda q, v: q + [('s', v)], 'validate': lambda v: v in ('a', 'b')},
    }
    assert apply_filters(calls, specs, {'n': '', 's': None}) == []
    assert apply_filters([], specs, {'n': '4', 's': 'a'}) == [('n', 4), ('s', 'a')]
    with pytest.raises(InvalidArgument):
        apply_filters([], specs, {'n': 'four'})
    with pytest.raises(InvalidArgument):
        apply_filters([], specs, {'s': 'z'})


def test_purchase_filters_from_args():
    f = PurchaseFilters.from_args('4', {
        'status': 'draft', 'payment_status': 'paid', 'supplier_id': '9', 'category': ' Fabric ',
        'date_from': '2024-01-01', 'date_to': '2024-01-31', 'search': 'PO_1', 'sort': '-grand_total',
    })
    assert f.company_id == 4 and f.supplier_id == 9 and f.category == 'Fabric'
    assert f.search == 'PO\\_1'
    assert f.date_to.date() == datetime(2024, 1, 31).date()
    empty = PurchaseFilters.from_args(4, {'status': '', 'supplier_id': ''})
    assert empty.status is None and empty.supplier_id is None


@pytest.mark.parametrize('args', [
    {'status': 'shipped'},
    {'payment_status': 'free'},
    {'supplier_id': 'abc'},
    {'date_from': 'yesterday'},
    {'date_from': '2024-02-01', 'date_to': '2024-01-01'},
])
def test_purchase_filters_fail_fast(args):
    with pytest.raises(InvalidArgument):
        PurchaseFilters.from_args(1, args)
