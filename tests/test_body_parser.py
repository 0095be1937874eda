from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import json

import pytest

from core.body_parser import parse_body, parse_reading_request
from core.errors import MalformedBody


def test_parse_json_body():
    raw = json.dumps({"q": "Love?", "first": "Ada"}).encode()
    assert parse_body("application/json; charset=utf-8", raw) == {"q": "Love?", "first": "Ada"}


def test_parse_form_body():
    raw = b"q=Will+I+move%3F&first=Ada&notes="
    assert parse_body("application/x-www-form-urlencoded", raw) == {
        "q": "Will I move?",
        "first": "Ada",
        "notes": "",
    }


def test_declared_json_that_fails_to_parse_is_malformed():
    with pytest.raises(MalformedBody) as excinfo:
        parse_body("application/json", b"{not json")
    assert excinfo.value.status == 400


def test_json_array_is_treated_as_empty_record():
    assert parse_body("application/json", b"[1, 2]") == {}


def test_unknown_content_type_falls_back_to_json():
    assert parse_body("text/plain", b'{"q": "Career?"}') == {"q": "Career?"}


def test_unknown_content_type_with_garbage_is_empty():
    assert parse_body("text/plain", b"\x00\x01 not anything") == {}
    assert parse_body("", b"a=1&b=2") == {}


def test_empty_body_is_empty_record():
    assert parse_body("application/json", b"") == {}
    assert parse_body("application/json", None) == {}


def test_pre_parsed_dict_is_used_as_is():
    body = {"q": "Already parsed"}
    assert parse_body("application/json", body) is body


def test_reading_request_defaults(valid_fields):
    del valid_fields["tz"]
    del valid_fields["notes"]
    req = parse_reading_request("application/json", json.dumps(valid_fields))

    assert req.question == "Will this year bring a career change?"
    assert req.tz == ""
    assert req.notes == ""
    assert req.consent is True
    assert req.captcha_token == valid_fields["hcaptchaToken"]


def test_reading_request_accepts_widget_token_alias_and_consent_strings():
    raw = b"q=x&h-captcha-response=tok123&consent=false"
    req = parse_reading_request("application/x-www-form-urlencoded", raw)

    assert req.captcha_token == "tok123"
    assert req.consent is False


def test_reading_request_strips_whitespace():
    req = parse_reading_request("application/json", b'{"first": "  Ada  ", "city": "   "}')
    assert req.first == "Ada"
    assert req.city == ""
