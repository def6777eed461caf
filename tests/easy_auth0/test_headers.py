import base64

import pytest

from easy_auth0 import (
    HeaderEncodingError,
    HeaderFormatError,
    get_basic_header,
    get_bearer_token,
    split_basic_credentials,
    trim,
)


def test_trim_strips_whitespace_controls_and_nbsp():
    assert trim("\u00a0 \t abc \r\n\u00a0") == "abc"
    assert trim("\x00abc\x1f") == "abc"
    assert trim("\u00a0abc\u00a0") == "abc"


def test_trim_keeps_inner_characters():
    assert trim(" a\u00a0b ") == "a\u00a0b"


def test_trim_of_blank_is_empty():
    assert trim("") == ""
    assert trim(" \u00a0 ") == ""


def test_bearer_token_ok():
    assert get_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


def test_bearer_token_tolerates_extra_whitespace():
    assert get_bearer_token("Bearer  abc ") == "abc"
    assert get_bearer_token("\u00a0Bearer abc\u00a0 ") == "abc"
    assert get_bearer_token("Bearer \u00a0abc") == "abc"


@pytest.mark.parametrize("header", ["Basic abc", "bearer abc", "Token abc", ""])
def test_bearer_token_wrong_scheme(header: str):
    with pytest.raises(HeaderFormatError):
        get_bearer_token(header)


@pytest.mark.parametrize("header", ["Bearer", "Bearer   ", "Bearerabc"])
def test_bearer_token_missing_value(header: str):
    with pytest.raises(HeaderFormatError):
        get_bearer_token(header)


def test_basic_header_decodes_utf8():
    encoded = base64.b64encode("josé:pässword".encode("utf-8")).decode("ascii")
    assert get_basic_header(f"Basic {encoded}") == "josé:pässword"


def test_basic_header_wrong_scheme():
    with pytest.raises(HeaderFormatError):
        get_basic_header("Bearer dXNlcjpwd2Q=")


def test_basic_header_missing_value():
    with pytest.raises(HeaderFormatError):
        get_basic_header("Basic")


def test_basic_header_bad_base64():
    with pytest.raises(HeaderEncodingError):
        get_basic_header("Basic not*base64!")


def test_basic_header_bad_utf8():
    encoded = base64.b64encode(b"\xff\xfe:\xfd").decode("ascii")
    with pytest.raises(HeaderEncodingError):
        get_basic_header(f"Basic {encoded}")


def test_split_basic_credentials_on_first_colon():
    assert split_basic_credentials("user:pa:ss") == ("user", "pa:ss")
    assert split_basic_credentials("user:") == ("user", "")


def test_split_basic_credentials_without_colon():
    with pytest.raises(HeaderFormatError):
        split_basic_credentials("useronly")


def test_basic_header_without_padding():
    assert get_basic_header("Basic dXNlcjpwZA") == "user:pd"
    assert get_basic_header("Basic dXNlcjpwZA==") == "user:pd"
