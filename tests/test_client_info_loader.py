import os

import pytest

from conftest import FULL_CLIENT_INFO
from sbxlite import ClientInfoRecord, LoadErrorCode, SafeKeyValueLoader, load_client_info


@pytest.fixture
def loader():
    return SafeKeyValueLoader()


def test_quoted_file_loads_all_keys(client_info_file):
    result = load_client_info(client_info_file())

    assert result.ok
    assert result.error is None
    assert list(result.record) == ["DOMAIN", "UUID", "PUBLIC_KEY", "SHORT_ID", "SNI", "REALITY_PORT"]
    assert result.record["DOMAIN"] == "vpn.example.com"
    assert result.record["REALITY_PORT"] == "443"


def test_unquoted_and_mixed_styles(loader):
    result = loader.parse_text('DOMAIN=example.com\nSNI="www.apple.com"\nREALITY_PORT=8443\n')

    assert result.ok
    assert dict(result.record) == {
        "DOMAIN": "example.com",
        "SNI": "www.apple.com",
        "REALITY_PORT": "8443",
    }


def test_comments_blank_lines_and_crlf_are_tolerated(loader):
    text = '# generated by the installer\r\n\r\n   \r\nDOMAIN="example.com"\r\n  # indented comment\r\nUUID=abc\r\n'
    result = loader.parse_text(text)

    assert result.ok
    assert dict(result.record) == {"DOMAIN": "example.com", "UUID": "abc"}


def test_quoted_value_may_contain_spaces(loader):
    result = loader.parse_text('SNI="www microsoft com"\n')
    assert result.ok
    assert result.record["SNI"] == "www microsoft com"


def test_empty_content_gives_empty_record(loader):
    result = loader.parse_text("")
    assert result.ok
    assert len(result.record) == 0


def test_unexpected_key_is_named_and_never_executed(client_info_file, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = client_info_file(FULL_CLIENT_INFO + 'MALICIOUS="$(touch pwn)"\n')

    result = load_client_info(path)

    assert not result.ok
    assert result.record is None
    assert result.error.code is LoadErrorCode.UNEXPECTED_KEY
    assert result.error.subject == "MALICIOUS"
    assert result.error.message == "Unexpected key 'MALICIOUS' in client info"
    assert result.error.line_number == 7
    assert not (tmp_path / "pwn").exists()


def test_unexpected_key_reported_before_value_checks(loader):
    result = loader.parse_text("PATH=/tmp;rm -rf /\n")
    assert result.error.code is LoadErrorCode.UNEXPECTED_KEY
    assert result.error.subject == "PATH"


@pytest.mark.parametrize(
    "line",
    [
        'DOMAIN="$(touch pwn)"',
        "DOMAIN=$(touch pwn)",
        'DOMAIN="`id`"',
        "DOMAIN=`id`",
        'DOMAIN="example.com; rm -rf /"',
        "DOMAIN=example.com;id",
        'DOMAIN="a | b"',
        "DOMAIN=a|b",
        'DOMAIN="a && b"',
        "DOMAIN=a&b",
        'DOMAIN="${HOME}"',
    ],
)
def test_suspicious_values_rejected_quoted_or_not(loader, line, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = loader.parse_text(line + "\n")

    assert result.error.code is LoadErrorCode.SUSPICIOUS_VALUE
    assert result.error.subject == "DOMAIN"
    assert result.error.message == "Suspicious characters in value for DOMAIN"
    assert not (tmp_path / "pwn").exists()


@pytest.mark.parametrize(
    "line",
    [
        "domain=example.com",
        " DOMAIN=example.com",
        "DOMAIN = example.com",
        "export DOMAIN=example.com",
        "DOMAIN",
        'DOMAIN="unterminated',
        'DOMAIN="a"trailing',
        'DOMAIN="a"b"',
    ],
)
def test_malformed_lines_are_invalid_format(loader, line):
    result = loader.parse_text(line + "\n")

    assert result.error.code is LoadErrorCode.INVALID_FORMAT
    assert result.error.subject == line
    assert result.error.message == f"Invalid client info format at line 1: {line}"


def test_quoted_value_cannot_span_lines(loader):
    result = loader.parse_text('DOMAIN="first\nsecond"\n')
    assert result.error.code is LoadErrorCode.INVALID_FORMAT
    assert result.error.line_number == 1


@pytest.mark.parametrize(
    "line",
    [
        "DOMAIN=example com",
        "DOMAIN=exa'mple",
        "DOMAIN=<example>",
        "DOMAIN=back\\slash",
        "DOMAIN=$HOME",
    ],
)
def test_unquoted_value_with_forbidden_characters_is_invalid_entry(loader, line):
    result = loader.parse_text(line + "\n")

    assert result.error.code is LoadErrorCode.INVALID_ENTRY
    assert result.error.message == f"Invalid client info entry: {line}"


def test_trailing_whitespace_after_value_is_ignored(loader):
    result = loader.parse_text('DOMAIN=example.com  \nSNI="www.apple.com"\t\n')
    assert dict(result.record) == {"DOMAIN": "example.com", "SNI": "www.apple.com"}


def test_first_failure_ends_the_load(loader):
    result = loader.parse_text('DOMAIN="ok"\nEVIL=1\nSNI="$(id)"\n')
    assert result.error.code is LoadErrorCode.UNEXPECTED_KEY
    assert result.error.line_number == 2


def test_duplicate_key_keeps_last_value(loader):
    result = loader.parse_text("DOMAIN=a.example\nSNI=x\nDOMAIN=b.example\n")
    assert list(result.record) == ["DOMAIN", "SNI"]
    assert result.record["DOMAIN"] == "b.example"


def test_custom_allow_list(tmp_path):
    loader = SafeKeyValueLoader(allowed_keys={"TOKEN"})
    assert loader.parse_text("TOKEN=abc\n").ok
    assert loader.parse_text("DOMAIN=x\n").error.code is LoadErrorCode.UNEXPECTED_KEY


def test_missing_and_non_utf8_files_are_unreadable(tmp_path):
    missing = load_client_info(tmp_path / "nope.txt")
    assert missing.error.code is LoadErrorCode.UNREADABLE
    assert "Client info not found" in missing.error.message

    directory = load_client_info(tmp_path)
    assert directory.error.code is LoadErrorCode.UNREADABLE

    binary = tmp_path / "binary.txt"
    binary.write_bytes(b"DOMAIN=\xff\xfe\n")
    assert load_client_info(binary).error.code is LoadErrorCode.UNREADABLE


def test_loading_twice_is_identical(client_info_file):
    path = client_info_file()
    first, second = load_client_info(path), load_client_info(path)

    assert first == second
    assert hash(first.record) == hash(second.record)


def test_record_is_read_only_and_hides_values(loader):
    record = loader.parse_text('UUID="secret-uuid"\n').record

    assert isinstance(record, ClientInfoRecord)
    with pytest.raises(TypeError):
        record["UUID"] = "other"  # type: ignore[index]
    assert "secret-uuid" not in repr(record)


def test_with_defaults_fills_port_and_sni(loader):
    record = loader.parse_text("DOMAIN=example.com\n").record.with_defaults()
    assert record["REALITY_PORT"] == "443"
    assert record["SNI"] == "www.microsoft.com"


def test_to_text_round_trips(loader, client_info_file):
    record = load_client_info(client_info_file()).record
    assert loader.parse_text(record.to_text()).record == record


def test_loader_never_spawns_processes(loader, monkeypatch):
    def forbidden(*args, **kwargs):
        raise AssertionError("loader must not start processes")

    monkeypatch.setattr(os, "system", forbidden)
    monkeypatch.setattr("subprocess.Popen", forbidden)

    result = loader.parse_text('DOMAIN="$(touch pwn)"\nUUID=`id`\n')
    assert result.error.code is LoadErrorCode.SUSPICIOUS_VALUE
