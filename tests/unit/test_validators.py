import pytest

from linkshortener.validators import MAX_URL_LENGTH, enforce_https, is_blocked_domain, is_valid_custom_code, is_valid_url


# -------------------------------
# enforce_https
# -------------------------------


@pytest.mark.parametrize(
    'url, expected',
    [
        ('example.com/page', 'https://example.com/page'),
        ('  example.com  ', 'https://example.com'),
        ('//example.com/page', 'https://example.com/page'),
        ('http://example.com', 'http://example.com'),
        ('https://example.com', 'https://example.com'),
        ('ftp://example.com/file', 'ftp://example.com/file'),
    ],
)
def test_enforce_https(url, expected):
    assert enforce_https(url) == expected


# -------------------------------
# is_valid_url
# -------------------------------


@pytest.mark.parametrize(
    'url',
    [
        'https://example.com',
        'http://example.com:8080/path?q=1#fragment',
        'https://sub.example.co.uk/a/b',
        'http://localhost:3000/page',
        'https://192.168.0.1/',
        'https://[::1]/',
        'https://example.xn--p1ai/',
        'https://例え.jp/page',
        'https://bücher.example/',
        'https://пример.рф/',
    ],
)
def test_valid_urls(url):
    assert is_valid_url(url)


@pytest.mark.parametrize(
    'url',
    [
        '',
        'example.com',
        'ftp://example.com',
        'https://',
        'https://exa mple.com',
        'https://example',
        'https://例え/',
        'https://ex..ample.com',
        'https://-bad.example.com',
        'https://example.c0m',
        'https://example.com:99999',
        'https://example.com/' + 'a' * MAX_URL_LENGTH,
    ],
)
def test_invalid_urls(url):
    assert not is_valid_url(url)


# -------------------------------
# is_blocked_domain
# -------------------------------


@pytest.mark.parametrize(
    'url, domain',
    [
        ('https://myshortener.com/abc', 'myshortener.com'),
        ('https://WWW.MyShortener.com/abc', 'myshortener.com'),
        ('https://myshortener.com:443/abc', 'myshortener.com'),
        ('http://myshortener.com:80/abc', 'myshortener.com'),
        ('myshortener.com/abc', 'myshortener.com'),
        ('http://localhost:3000/abc', 'localhost:3000'),
        ('https://例え.jp/abc', 'xn--r8jz45g.jp'),
    ],
)
def test_blocked_domains(url, domain):
    assert is_blocked_domain(url, domain)


@pytest.mark.parametrize(
    'url, domain',
    [
        ('https://example.com/abc', 'myshortener.com'),
        ('https://myshortener.com.evil.com/abc', 'myshortener.com'),
        ('https://sub.myshortener.com/abc', 'myshortener.com'),
        ('http://localhost:4000/abc', 'localhost:3000'),
        ('https://myshortener.com/abc', ''),
    ],
)
def test_allowed_domains(url, domain):
    assert not is_blocked_domain(url, domain)


# -------------------------------
# is_valid_custom_code
# -------------------------------


@pytest.mark.parametrize('code', ['docs', 'my-link_1', 'A' * 32])
def test_valid_custom_codes(code):
    assert is_valid_custom_code(code)


@pytest.mark.parametrize('code', ['', 'A' * 33, 'has space', 'slash/code', 'ünïcode', None])
def test_invalid_custom_codes(code):
    assert not is_valid_custom_code(code)
