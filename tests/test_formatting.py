from finsight.formatting import format_currency


def test_format_currency_rounds_to_whole_baht():
    assert format_currency(1234.56) == '฿1,235'
    assert format_currency(0) == '฿0'


def test_format_currency_negative_and_unsigned():
    assert format_currency(-2500) == '-฿2,500'
    assert format_currency(1000000, include_sign=False) == '1,000,000'
